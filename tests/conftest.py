"""Pytest hooks and fixtures."""

import json
import os
from types import SimpleNamespace
from typing import Any

import pytest


def pytest_collection_modifyitems(config, items):
    """Skip live tests when running in CI (no Lotus node or Swan account)."""
    if os.environ.get("CI") != "true":
        return
    skip = pytest.mark.skip(reason="Requires a live Lotus node / Swan account (skipped in CI)")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip)


class RecordingTransport:
    """Stands in for HttpTransport: records every call and replays queued bodies."""

    def __init__(self) -> None:
        self.responses: list[str] = []
        self.calls: list[SimpleNamespace] = []
        self.multipart_error: Exception | None = None

    def queue(self, *bodies: Any) -> None:
        for body in bodies:
            self.responses.append(body if isinstance(body, str) else json.dumps(body))

    def _next(self) -> str:
        return self.responses.pop(0) if self.responses else ""

    def exchange(self, url, body=None, *, token=None, method="POST", form=None) -> str:
        self.calls.append(SimpleNamespace(method=method, url=url, body=body, token=token, form=form))
        return self._next()

    def get(self, url, body=None, *, token=None) -> str:
        return self.exchange(url, body, token=token, method="GET")

    def post(self, url, body=None, *, token=None) -> str:
        return self.exchange(url, body, token=token, method="POST")

    def put(self, url, body=None, *, token=None, form=None) -> str:
        return self.exchange(url, body, token=token, method="PUT", form=form)

    def exchange_multipart(self, url, token, fields, file_field, file_path) -> str:
        self.calls.append(
            SimpleNamespace(
                method="MULTIPART",
                url=url,
                token=token,
                form=dict(fields),
                file_field=file_field,
                file_path=file_path,
            )
        )
        if self.multipart_error is not None:
            raise self.multipart_error
        return self._next()


class RecordingLog:
    """Minimal loguru-compatible sink that keeps (level, message) pairs."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def debug(self, message: str) -> None:
        self.records.append(("DEBUG", message))

    def info(self, message: str) -> None:
        self.records.append(("INFO", message))

    def warning(self, message: str) -> None:
        self.records.append(("WARNING", message))

    def error(self, message: str) -> None:
        self.records.append(("ERROR", message))

    def messages(self, level: str = "ERROR") -> list[str]:
        return [m for lvl, m in self.records if lvl == level]


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def log() -> RecordingLog:
    return RecordingLog()
