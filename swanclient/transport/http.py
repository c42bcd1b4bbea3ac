"""Blocking HTTP exchange shared by the Lotus and Swan adapters.

Every call opens its own ``httpx.Client`` so the transport holds no
connection state and can be used from several threads at once.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping

import httpx
from loguru import logger

from swanclient.utils.exceptions import TransportFailure, sanitize_error_message

if TYPE_CHECKING:
    from loguru import Logger

    from swanclient.config.schema import HttpConfig

_METHODS = frozenset({"GET", "POST", "PUT"})


class HttpTransport:
    """Single request/response exchange; failures collapse to an empty body."""

    def __init__(
        self,
        timeout: float = 30.0,
        *,
        http_transport: httpx.BaseTransport | None = None,
        log: Logger | None = None,
    ):
        """
        Args:
            timeout: Dispatch deadline in seconds for each request
            http_transport: Optional httpx transport (e.g. ``httpx.MockTransport``)
            log: Logging sink; defaults to the loguru logger bound to this component
        """
        self.timeout = timeout
        self._http_transport = http_transport
        self._log = log or logger.bind(component="transport")

    @classmethod
    def from_config(cls, config: HttpConfig, **kwargs: Any) -> HttpTransport:
        return cls(timeout=config.timeout, **kwargs)

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, transport=self._http_transport)

    @staticmethod
    def _headers(token: str | None) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def exchange(
        self,
        url: str,
        body: Any = None,
        *,
        token: str | None = None,
        method: str = "POST",
        form: Mapping[str, str] | None = None,
    ) -> str:
        """
        Send one request and return the response text.

        ``body`` is sent as JSON; ``form`` (when given) is sent url-encoded
        instead. Returns "" on network errors, timeouts, non-2xx statuses and
        unreadable bodies. The caller must treat "" as "no response".
        """
        verb = method.upper()
        if verb not in _METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        kwargs: dict[str, Any] = {}
        if form is not None:
            kwargs["data"] = dict(form)
        elif body is not None:
            kwargs["json"] = body

        try:
            with self._client() as client:
                resp = client.request(verb, url, headers=self._headers(token), **kwargs)
                text = resp.text
        except httpx.TimeoutException as exc:
            self._log.error(f"{verb} {url} timed out after {self.timeout}s: {exc}")
            return ""
        except httpx.HTTPError as exc:
            self._log.error(f"{verb} {url} failed: {sanitize_error_message(str(exc))}")
            return ""

        if not resp.is_success:
            self._log.error(
                f"{verb} {url} returned http {resp.status_code}: {sanitize_error_message(text[:200])}"
            )
            return ""
        return text

    def get(self, url: str, body: Any = None, *, token: str | None = None) -> str:
        return self.exchange(url, body, token=token, method="GET")

    def post(self, url: str, body: Any = None, *, token: str | None = None) -> str:
        return self.exchange(url, body, token=token, method="POST")

    def put(
        self,
        url: str,
        body: Any = None,
        *,
        token: str | None = None,
        form: Mapping[str, str] | None = None,
    ) -> str:
        return self.exchange(url, body, token=token, method="PUT", form=form)

    def exchange_multipart(
        self,
        url: str,
        token: str | None,
        fields: Mapping[str, str],
        file_field: str,
        file_path: str | Path,
    ) -> str:
        """
        POST ``fields`` plus the file at ``file_path`` as multipart/form-data.

        Unlike ``exchange`` this raises TransportFailure, so the caller can
        tell a missing file from a rejected upload.
        """
        path = Path(file_path)
        if not path.is_file():
            raise TransportFailure(url, f"file not found: {path}")

        try:
            with path.open("rb") as fh, self._client() as client:
                resp = client.post(
                    url,
                    headers=self._headers(token),
                    data=dict(fields),
                    files={file_field: (path.name, fh)},
                )
                text = resp.text
        except httpx.HTTPError as exc:
            raise TransportFailure(url, f"upload of {path} failed: {sanitize_error_message(str(exc))}") from exc
        except OSError as exc:
            raise TransportFailure(url, f"cannot read {path}: {exc}") from exc

        if not resp.is_success:
            raise TransportFailure(url, f"upload of {path} returned http {resp.status_code}")
        return text
