"""Accessory handler binding one KEF speaker to its characteristics."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime
from enum import Enum
from typing import Any, Protocol
import logging

from .client import KefSpeakerClient, KefSpeakerError, PowerState, UNKNOWN_SOURCE

_LOGGER = logging.getLogger(__name__)

PollAction = Callable[[datetime], Awaitable[None]]
PollScheduler = Callable[[PollAction], Callable[[], None]]


class Characteristic(str, Enum):
    """Values an accessory exposes to the host."""

    POWER = "power"
    MUTE = "mute"
    VOLUME_ON = "volume_on"
    VOLUME = "volume"
    SOURCE = "source"
    PLAYING = "playing"


class CharacteristicSink(Protocol):
    """Where an accessory handler pushes characteristic values."""

    def set(self, kind: Characteristic, value: Any) -> None:
        ...

    def get(self, kind: Characteristic) -> Any:
        ...

    def update(self, values: Mapping[Characteristic, Any]) -> None:
        ...


class CharacteristicStore:
    """In-memory characteristic values with change listeners."""

    def __init__(self) -> None:
        self._values: dict[Characteristic, Any] = {}
        self._listeners: list[Callable[[], None]] = []

    def set(self, kind: Characteristic, value: Any) -> None:
        self.update({kind: value})

    def update(self, values: Mapping[Characteristic, Any]) -> None:
        """Store several values and notify listeners once."""

        self._values.update(values)
        for listener in list(self._listeners):
            listener()

    def get(self, kind: Characteristic) -> Any:
        return self._values.get(kind)

    def async_add_listener(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Call listener after every change; returns the unsubscribe callable."""

        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove


class AccessoryHandler:
    """Serve characteristic reads and writes for one speaker and keep them polled.

    Every accessor swallows client errors after logging them and answers with a
    safe default, so nothing raised by the speaker reaches the host.

    ``schedule`` starts the repeating poll: it receives the tick coroutine and
    returns the callable that cancels it, the contract of
    ``homeassistant.helpers.event.async_track_time_interval``. Ticks are not
    serialized, so a slow speaker can have two in flight.
    """

    def __init__(
        self,
        client: KefSpeakerClient,
        sink: CharacteristicSink,
        *,
        name: str,
        schedule: PollScheduler,
        logger: logging.Logger | None = None,
    ) -> None:
        self.client = client
        self.sink = sink
        self.name = name
        self.last_poll_success = True
        self._logger = logger or _LOGGER
        self._unsub_poll: Callable[[], None] | None = schedule(self._async_poll_tick)

    @property
    def polling(self) -> bool:
        return self._unsub_poll is not None

    def stop(self) -> None:
        """Cancel the repeating poll."""

        if self._unsub_poll is not None:
            self._unsub_poll()
            self._unsub_poll = None

    async def _async_poll_tick(self, now: datetime) -> None:
        await self.async_poll()

    async def async_poll(self) -> None:
        """Push fresh power and volume straight into the sink."""

        try:
            status = await self.client.async_get_status()
            volume = await self.client.async_get_volume()
        except KefSpeakerError as err:
            self.last_poll_success = False
            self._logger.error("Error polling speaker status for %s: %s", self.name, err)
            return
        except Exception:
            self.last_poll_success = False
            self._logger.exception("Unexpected error polling %s", self.name)
            return
        self.last_poll_success = True
        try:
            self.sink.update(
                {
                    Characteristic.POWER: status is PowerState.ON,
                    Characteristic.VOLUME: volume,
                }
            )
        except Exception:
            self._logger.exception("Error publishing polled state for %s", self.name)

    async def async_refresh(self) -> None:
        """Read every characteristic through its get handler and push it."""

        power = await self.async_get_power()
        volume = await self.async_get_volume()
        source = await self.async_get_source()
        playing = await self.async_get_playing()
        self.sink.update(
            {
                Characteristic.POWER: power,
                Characteristic.VOLUME: volume,
                Characteristic.MUTE: volume == 0,
                Characteristic.VOLUME_ON: volume > 0,
                Characteristic.SOURCE: source,
                Characteristic.PLAYING: playing,
            }
        )

    async def async_set_power(self, value: bool) -> None:
        try:
            if value:
                await self.client.async_power_on()
            else:
                await self.client.async_shutdown()
        except KefSpeakerError as err:
            self._logger.error("Error setting power state for %s: %s", self.name, err)

    async def async_get_power(self) -> bool:
        try:
            return await self.client.async_get_status() is PowerState.ON
        except KefSpeakerError as err:
            self._logger.error("Error getting power state for %s: %s", self.name, err)
            return False

    async def async_set_mute(self, value: bool) -> None:
        try:
            if value:
                await self.client.async_mute()
            else:
                await self.client.async_unmute()
        except KefSpeakerError as err:
            self._logger.error("Error setting mute state for %s: %s", self.name, err)

    async def async_get_mute(self) -> bool:
        try:
            return await self.client.async_get_volume() == 0
        except KefSpeakerError as err:
            self._logger.error("Error getting mute state for %s: %s", self.name, err)
            return False

    async def async_set_volume_on(self, value: bool) -> None:
        if value:
            return
        try:
            await self.client.async_set_volume(0)
        except KefSpeakerError as err:
            self._logger.error("Error setting volume to 0 for %s: %s", self.name, err)

    async def async_get_volume_on(self) -> bool:
        try:
            return await self.client.async_get_volume() > 0
        except KefSpeakerError as err:
            self._logger.error("Error getting volume state for %s: %s", self.name, err)
            return False

    async def async_set_volume(self, value: int) -> None:
        try:
            await self.client.async_set_volume(value)
        except KefSpeakerError as err:
            self._logger.error("Error setting volume for %s: %s", self.name, err)

    async def async_get_volume(self) -> int:
        try:
            return await self.client.async_get_volume()
        except KefSpeakerError as err:
            self._logger.error("Error getting volume for %s: %s", self.name, err)
            return 0

    async def async_set_source(self, value: str) -> None:
        try:
            await self.client.async_set_source(value)
        except KefSpeakerError as err:
            self._logger.error("Error setting source for %s: %s", self.name, err)

    async def async_get_source(self) -> str:
        try:
            return await self.client.async_get_source()
        except KefSpeakerError as err:
            self._logger.error("Error getting source for %s: %s", self.name, err)
            return UNKNOWN_SOURCE

    async def async_get_playing(self) -> bool:
        try:
            return await self.client.async_is_playing()
        except KefSpeakerError as err:
            self._logger.error("Error getting playback state for %s: %s", self.name, err)
            return False

    async def async_toggle_play_pause(self) -> None:
        try:
            await self.client.async_toggle_play_pause()
        except KefSpeakerError as err:
            self._logger.error("Error toggling playback for %s: %s", self.name, err)
