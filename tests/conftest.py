"""Test fixtures for the KEF speaker integration."""

from __future__ import annotations

from collections import deque
from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from custom_components.kef_speaker.client import KefSpeakerClient, PowerState
from custom_components.kef_speaker.models import AccessoryRecord

SPEAKER_IP = "192.168.1.100"


class FakeResponse:
    """Minimal stand-in for aiohttp.ClientResponse."""

    def __init__(self, status: int = 200, payload: Any = None) -> None:
        self.status = status
        self._payload = {} if payload is None else payload

    @property
    def ok(self) -> bool:
        return self.status < 400

    async def json(self, content_type: str | None = "application/json") -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _RequestContext:
    def __init__(self, outcome: FakeResponse | Exception) -> None:
        self._outcome = outcome

    async def __aenter__(self) -> FakeResponse:
        if isinstance(self._outcome, Exception):
            raise self._outcome
        return self._outcome

    async def __aexit__(self, *exc_info: Any) -> None:
        return None


class FakeSession:
    """Scripted session: each request consumes the next queued outcome."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self._outcomes: deque[FakeResponse | Exception] = deque()

    def queue(self, outcome: FakeResponse | Exception) -> None:
        self._outcomes.append(outcome)

    def request(self, method: str, url: Any, **kwargs: Any) -> _RequestContext:
        self.calls.append((method, str(url), kwargs))
        outcome = self._outcomes.popleft() if self._outcomes else FakeResponse()
        return _RequestContext(outcome)


class FakeScheduler:
    """Stands in for async_track_time_interval; ticks fire on demand."""

    def __init__(self) -> None:
        self.action: Any = None
        self.cancelled = False

    def __call__(self, action: Any) -> Any:
        self.action = action
        return self.cancel

    def cancel(self) -> None:
        self.cancelled = True

    async def fire(self) -> None:
        await self.action(datetime(2026, 1, 1, 12, 0, 0))


class InMemoryRegistry:
    """Accessory registry that only remembers what it was told."""

    def __init__(self) -> None:
        self.records: dict[str, AccessoryRecord] = {}
        self.upserted: list[AccessoryRecord] = []
        self.removed: list[AccessoryRecord] = []

    def upsert(self, record: AccessoryRecord) -> None:
        self.records[record.uid] = record
        self.upserted.append(record)

    def remove(self, record: AccessoryRecord) -> None:
        self.records.pop(record.uid, None)
        self.removed.append(record)


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(session: FakeSession) -> KefSpeakerClient:
    return KefSpeakerClient(session, SPEAKER_IP)  # type: ignore[arg-type]


@pytest.fixture
def mock_client() -> AsyncMock:
    mock = AsyncMock(spec=KefSpeakerClient)
    mock.host = SPEAKER_IP
    mock.async_get_status.return_value = PowerState.ON
    mock.async_get_volume.return_value = 75
    mock.async_get_source.return_value = "wifi"
    mock.async_is_playing.return_value = False
    return mock


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def logger() -> MagicMock:
    return MagicMock()


@pytest.fixture
def registry() -> InMemoryRegistry:
    return InMemoryRegistry()
