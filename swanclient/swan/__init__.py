"""Swan task service adapter."""

from swanclient.swan.client import SwanClient
from swanclient.swan.types import OfflineDeal, SwanSession, Task

__all__ = ["SwanClient", "OfflineDeal", "SwanSession", "Task"]
