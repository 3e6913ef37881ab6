"""
Pytest configuration and shared fixtures.
"""

import inspect
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import pytest

# settings are read at import time, so the environment must be ready first
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("SEARCH_API_KEY", "test-api-key")

from docsearch.documents import Documents  # noqa: E402
from docsearch.platform.config import Settings  # noqa: E402
from docsearch.transport.base import Transport  # noqa: E402


@dataclass
class RecordedCall:
    method: str
    path: str
    query_parameters: Optional[Dict[str, Any]]
    body_parameters: Any
    additional_headers: Optional[Dict[str, str]]
    abort_signal: Any
    response_type: str


class FakeTransport(Transport):
    """In-memory transport recording every request; ``handler`` builds the response."""

    def __init__(self, handler: Optional[Callable[[RecordedCall], Any]] = None):
        self.calls: List[RecordedCall] = []
        self.handler = handler or (lambda call: None)

    async def connect(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def health_check(self) -> bool:
        return True

    async def perform_request(
        self,
        method,
        path,
        *,
        query_parameters=None,
        body_parameters=None,
        additional_headers=None,
        abort_signal=None,
        response_type="json",
    ):
        call = RecordedCall(
            method, path, query_parameters, body_parameters, additional_headers, abort_signal, response_type
        )
        self.calls.append(call)
        result = self.handler(call)
        if inspect.isawaitable(result):
            result = await result
        return result


@pytest.fixture
def settings() -> Settings:
    return Settings(SEARCH_API_KEY="test-api-key", _env_file=None)


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def documents(fake_transport, settings) -> Documents:
    return Documents("books", fake_transport, settings=settings)
