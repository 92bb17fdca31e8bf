"""Shared fixtures: a recording fake HTTP session and an inline executor."""

import json
from concurrent.futures import Executor, Future
from typing import Any, Callable, List, Optional, Tuple

import pytest

from dbus_api.client import DbusClient


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "") -> None:
        self.status_code = status_code
        self.text = text

    def json(self) -> Any:
        return json.loads(self.text)


class FakeSession:
    """Stands in for requests.Session and records every GET it receives."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, dict]] = []
        self.response = FakeResponse(200, '{"estado": "OK"}')
        self.error: Optional[Exception] = None
        self.closed = False

    def respond(self, status_code: int, text: str) -> None:
        self.response = FakeResponse(status_code, text)

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def close(self) -> None:
        self.closed = True

    @property
    def urls(self) -> List[str]:
        return [url for url, _ in self.calls]


class InlineExecutor(Executor):
    """Runs submitted work immediately in the calling thread."""

    def __init__(self) -> None:
        self.submitted = 0

    def submit(self, fn: Callable, /, *args: Any, **kwargs: Any) -> Future:
        self.submitted += 1
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def executor() -> InlineExecutor:
    return InlineExecutor()


@pytest.fixture
def client(session: FakeSession, executor: InlineExecutor) -> DbusClient:
    """Client with default settings wired to the fake session."""
    return DbusClient(session=session, executor=executor)
