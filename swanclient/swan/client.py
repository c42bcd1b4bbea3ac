"""HTTP client for the Swan task service."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any
from urllib.parse import quote, urlencode

from loguru import logger
from pydantic import ValidationError

from swanclient.swan.types import (
    GET_OFFLINE_DEAL_LIMIT_DEFAULT,
    OfflineDeal,
    OfflineDealsResponse,
    StatusResponse,
    SwanSession,
    Task,
    UpdateOfflineDealResponse,
    is_success,
)
from swanclient.transport.http import HttpTransport
from swanclient.utils.exceptions import (
    DecodeFailure,
    ProtocolError,
    SwanAuthError,
    TransportFailure,
)

if TYPE_CHECKING:
    from loguru import Logger

    from swanclient.config.schema import SwanConfig

_STATUS_INFO_FIELDS = ("note", "file_path", "file_size")


def _load_json_object(text: str) -> dict[str, Any]:
    try:
        body = json.loads(text)
    except json.JSONDecodeError:
        return {}
    return body if isinstance(body, dict) else {}


class SwanClient:
    """
    Authenticated Swan REST client.

    Use ``SwanClient.connect`` to run the token handshake; the resulting
    session is fixed for the lifetime of the client (create a new client to
    re-authenticate).
    """

    def __init__(
        self,
        session: SwanSession,
        *,
        transport: HttpTransport | None = None,
        log: Logger | None = None,
    ):
        self.session = session
        self._log = log or logger.bind(component="swan")
        self.transport = transport or HttpTransport(log=self._log)

    @property
    def api_url(self) -> str:
        return self.session.api_url

    @property
    def token(self) -> str:
        return self.session.token

    @classmethod
    def connect(
        cls,
        api_url: str,
        api_key: str,
        access_token: str,
        *,
        transport: HttpTransport | None = None,
        log: Logger | None = None,
    ) -> SwanClient:
        """
        Acquire a session token and return a ready client.

        Raises SwanAuthError when the service reports a failure or returns no
        token. Deciding whether that ends the process is left to the caller.
        """
        log = log or logger.bind(component="swan")
        transport = transport or HttpTransport(log=log)
        base = api_url.rstrip("/")

        response = transport.post(
            f"{base}/user/api_keys/jwt",
            {"apikey": api_key, "access_token": access_token},
        )
        body = _load_json_object(response)
        if body:
            failed = "fail" in str(body.get("status") or "").lower()
        else:
            failed = "fail" in response.lower()

        if failed:
            status = str(body.get("status") or "fail")
            message = str(body.get("message") or "")
            log.error(f"{status}: {message}")
            raise SwanAuthError(status, message)

        data = body.get("data")
        jwt = data.get("jwt") if isinstance(data, dict) else None
        if not isinstance(jwt, str) or not jwt:
            log.error(f"Error: fail to connect swan api at {base}")
            raise SwanAuthError("error", f"fail to connect swan api at {base}")

        session = SwanSession(api_url=base, api_key=api_key, token=jwt)
        return cls(session, transport=transport, log=log)

    @classmethod
    def from_config(cls, config: SwanConfig, **kwargs: Any) -> SwanClient:
        return cls.connect(config.api_url, config.api_key, config.access_token, **kwargs)

    def get_offline_deals(
        self,
        miner_fid: str,
        status: str,
        limit: int = GET_OFFLINE_DEAL_LIMIT_DEFAULT,
    ) -> list[OfflineDeal]:
        """
        Deals of ``miner_fid`` currently in ``status``.

        Any failure (no response, bad body, non-success status) is logged and
        yields an empty list, the same as "no deals". A single unreadable
        record is logged and skipped.
        """
        query = urlencode({"deal_status": status, "limit": limit, "offset": 0})
        url = f"{self.api_url}/offline_deals/{quote(miner_fid)}?{query}"
        response = self.transport.get(url, token=self.token)
        if not response:
            self._log.error(f"Get offline deal with status {status} failed, no response from {self.api_url}")
            return []

        try:
            parsed = OfflineDealsResponse.model_validate_json(response)
        except ValidationError as exc:
            self._log.error(f"Get offline deal with status {status} failed, bad response: {exc.error_count()} errors")
            return []

        if not is_success(parsed.status):
            self._log.error(f"Get offline deal with status {status} failed")
            return []

        deals: list[OfflineDeal] = []
        for record in parsed.data.deal:
            try:
                deals.append(OfflineDeal.model_validate(record))
            except ValidationError as exc:
                deal_id = record.get("id") if isinstance(record, dict) else None
                self._log.warning(f"Skip offline deal {deal_id}: {exc.error_count()} invalid fields")
        return deals

    def update_offline_deal_status(self, deal_id: int, status: str, *status_info: Any) -> bool:
        """
        Move deal ``deal_id`` to ``status``.

        ``status_info`` is positional: note, then file_path, then file_size.
        Only the supplied leading fields are sent.
        """
        if not status:
            self._log.error("Please provide status")
            return False

        form = {"status": status}
        for key, value in zip(_STATUS_INFO_FIELDS, status_info):
            form[key] = str(value)

        url = f"{self.api_url}/my_miner/deals/{deal_id}"
        response = self.transport.put(url, token=self.token, form=form)
        if not response:
            self._log.error(f"Update offline deal {deal_id} with status {status} failed, no response")
            return False

        try:
            parsed = UpdateOfflineDealResponse.model_validate_json(response)
        except ValidationError as exc:
            self._log.error(f"Update offline deal {deal_id} with status {status} failed, bad response: {exc.error_count()} errors")
            return False

        if not is_success(parsed.status):
            message = parsed.data.message or parsed.message
            self._log.error(f"Update offline deal {deal_id} with status {status} failed. {message}")
            return False

        return True

    def update_task_by_uuid(self, task_uuid: str, miner_fid: str) -> str:
        """
        Assign ``miner_fid`` to the task ``task_uuid`` and return the raw response.

        The response is checked like every other update: no response raises
        TransportFailure, an unreadable body DecodeFailure and a non-success
        status ProtocolError.
        """
        target = f"update task {task_uuid}"
        url = f"{self.api_url}/uuid_tasks/{quote(task_uuid)}"
        response = self.transport.put(url, token=self.token, form={"miner_fid": miner_fid})
        if not response:
            err = TransportFailure(target, f"no response from {self.api_url}")
            self._log.error(str(err))
            raise err

        try:
            parsed = StatusResponse.model_validate_json(response)
        except ValidationError as exc:
            err = DecodeFailure(target, f"{exc.error_count()} errors")
            self._log.error(str(err))
            raise err from exc

        if not is_success(parsed.status):
            err = ProtocolError(target, parsed.message or f"status {parsed.status!r}")
            self._log.error(str(err))
            raise err

        return response

    def create_task(self, task: Task, csv_file_path: str) -> str:
        """Upload task metadata plus its CSV; returns the raw response or "" on failure."""
        url = f"{self.api_url}/tasks"
        try:
            return self.transport.exchange_multipart(url, self.token, task.to_form(), "file", csv_file_path)
        except TransportFailure as exc:
            self._log.error(f"create task {task.task_name} failed: {exc.message}")
            return ""
