"""HTTP transport shared by the Lotus and Swan adapters."""

from swanclient.transport.http import HttpTransport

__all__ = ["HttpTransport"]
