"""Async client for the KEF speaker HTTP control API."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional
import asyncio
import logging

from aiohttp import ClientError, ClientSession
import voluptuous as vol
from yarl import URL

from .const import DEFAULT_PORT

_LOGGER = logging.getLogger(__name__)

PATH_POWER_ON = "/api/v1/host/set_power_on"
PATH_STANDBY = "/api/v1/host/set_standby"
PATH_HOST_STATUS = "/api/v1/host/get_status"
PATH_SET_SOURCE = "/api/v1/host/set_source"
PATH_MUTE = "/api/v1/player/set_mute"
PATH_UNMUTE = "/api/v1/player/set_unmute"
PATH_TOGGLE_PLAY_PAUSE = "/api/v1/player/toggle_play_pause"
PATH_SET_VOLUME = "/api/v1/player/set_volume"
PATH_PLAYER_STATUS = "/api/v1/player/get_player_status"

UNKNOWN_SOURCE = "unknown"


class KefSpeakerError(Exception):
    """Raised when talking to the speaker fails."""


class InvalidArgument(KefSpeakerError, ValueError):
    """Raised before any request when an argument is out of range."""


class CommandFailed(KefSpeakerError):
    """Raised when an action request fails or is rejected by the speaker."""

    def __init__(self, endpoint: str, cause: Any) -> None:
        super().__init__(f"Failed to send command to {endpoint}: {cause}")
        self.endpoint = endpoint
        self.cause = cause


class QueryFailed(KefSpeakerError):
    """Raised when a status read fails."""

    def __init__(self, endpoint: str, cause: Any) -> None:
        super().__init__(f"Failed to get data from {endpoint}: {cause}")
        self.endpoint = endpoint
        self.cause = cause


class PayloadError(QueryFailed):
    """Raised when the speaker answers with a payload we cannot decode."""


class PowerState(str, Enum):
    """Power state reported by the host status endpoint."""

    ON = "powerOn"
    STANDBY = "standby"


class SpeakerSource(str, Enum):
    """Inputs accepted by set_source."""

    WIFI = "wifi"
    BLUETOOTH = "bluetooth"
    TV = "tv"
    OPTICAL = "optical"
    COAXIAL = "coaxial"
    ANALOG = "analog"


HOST_STATUS_SCHEMA = vol.Schema(
    {vol.Optional("status"): vol.Any(str, None)},
    extra=vol.ALLOW_EXTRA,
)

PLAYER_STATUS_SCHEMA = vol.Schema(
    {
        vol.Optional("volume"): vol.Any(None, vol.All(vol.Coerce(int), vol.Range(min=0, max=100))),
        vol.Optional("source"): vol.Any(str, None),
        vol.Optional("state"): vol.Any(str, None),
    },
    extra=vol.ALLOW_EXTRA,
)


@dataclass(slots=True, frozen=True)
class PlayerStatus:
    """Decoded answer of get_player_status."""

    volume: int = 0
    source: str = UNKNOWN_SOURCE
    state: Optional[str] = None

    @property
    def is_playing(self) -> bool:
        return self.state == "playing"

    @classmethod
    def from_payload(cls, payload: Any) -> PlayerStatus:
        data = PLAYER_STATUS_SCHEMA(payload)
        return cls(
            volume=data.get("volume") or 0,
            source=data.get("source") or UNKNOWN_SOURCE,
            state=data.get("state"),
        )


class KefSpeakerClient:
    """Small helper around the KEF JSON control API."""

    def __init__(
        self,
        session: ClientSession,
        host: str,
        port: int = DEFAULT_PORT,
    ) -> None:
        self._session = session
        self._host = host
        self._port = port
        self._base = URL.build(scheme="http", host=host, port=port)

    @property
    def host(self) -> str:
        return self._host

    async def async_power_on(self) -> None:
        await self._command(PATH_POWER_ON)

    async def async_shutdown(self) -> None:
        await self._command(PATH_STANDBY)

    async def async_mute(self) -> None:
        await self._command(PATH_MUTE)

    async def async_unmute(self) -> None:
        await self._command(PATH_UNMUTE)

    async def async_toggle_play_pause(self) -> None:
        await self._command(PATH_TOGGLE_PLAY_PAUSE)

    async def async_set_volume(self, volume: int) -> None:
        if isinstance(volume, bool) or not isinstance(volume, (int, float)) or not 0 <= volume <= 100:
            raise InvalidArgument("Volume must be between 0 and 100")
        _LOGGER.debug("Setting volume on %s to %s", self._host, volume)
        await self._command(PATH_SET_VOLUME, {"volume": round(volume)})

    async def async_set_source(self, source: str) -> None:
        try:
            selected = SpeakerSource(source)
        except ValueError as err:
            valid = ", ".join(item.value for item in SpeakerSource)
            raise InvalidArgument(f"Invalid source. Must be one of: {valid}") from err
        await self._command(PATH_SET_SOURCE, {"source": selected.value})

    async def async_get_player_status(self) -> PlayerStatus:
        payload = await self._query(PATH_PLAYER_STATUS)
        try:
            return PlayerStatus.from_payload(payload)
        except vol.Invalid as err:
            raise PayloadError(PATH_PLAYER_STATUS, err) from err

    async def async_get_volume(self) -> int:
        status = await self.async_get_player_status()
        return status.volume

    async def async_get_source(self) -> str:
        status = await self.async_get_player_status()
        return status.source

    async def async_is_playing(self) -> bool:
        status = await self.async_get_player_status()
        return status.is_playing

    async def async_get_status(self) -> PowerState:
        """Return the power state, falling back to standby on any failure."""

        try:
            payload = HOST_STATUS_SCHEMA(await self._query(PATH_HOST_STATUS))
        except (KefSpeakerError, vol.Invalid) as err:
            _LOGGER.debug("%s: host status unavailable, assuming standby: %s", self._host, err)
            return PowerState.STANDBY
        if payload.get("status") == PowerState.ON.value:
            return PowerState.ON
        return PowerState.STANDBY

    async def _command(self, path: str, body: Optional[dict[str, Any]] = None) -> None:
        url = self._base.with_path(path)
        try:
            async with self._session.request("post", url, json=body or {}) as resp:
                if not resp.ok:
                    raise CommandFailed(path, f"HTTP error status: {resp.status}")
        except (ClientError, asyncio.TimeoutError) as err:
            raise CommandFailed(path, err) from err

    async def _query(self, path: str) -> Any:
        url = self._base.with_path(path)
        try:
            async with self._session.request("get", url) as resp:
                if not resp.ok:
                    raise QueryFailed(path, f"HTTP error status: {resp.status}")
                return await resp.json(content_type=None)
        except (ClientError, asyncio.TimeoutError) as err:
            raise QueryFailed(path, err) from err
        except ValueError as err:
            raise PayloadError(path, err) from err
