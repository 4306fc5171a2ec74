"""Media player platform for KEF speakers."""

from __future__ import annotations

from datetime import timedelta

from homeassistant.components.media_player import MediaPlayerEntity
from homeassistant.components.media_player.const import (
    MediaPlayerEntityFeature,
    MediaPlayerState,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .accessory import AccessoryHandler, Characteristic, CharacteristicStore
from .client import SpeakerSource, UNKNOWN_SOURCE
from .const import DOMAIN, MANUFACTURER
from .controller import SpeakerPlatform
from .models import AccessoryRecord

SUPPORTED_FEATURES = (
    MediaPlayerEntityFeature.TURN_ON
    | MediaPlayerEntityFeature.TURN_OFF
    | MediaPlayerEntityFeature.VOLUME_SET
    | MediaPlayerEntityFeature.VOLUME_MUTE
    | MediaPlayerEntityFeature.SELECT_SOURCE
    | MediaPlayerEntityFeature.PLAY
    | MediaPlayerEntityFeature.PAUSE
)

# source and playback are not part of the fast poll, so the entity refreshes them
SCAN_INTERVAL = timedelta(seconds=30)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    platform: SpeakerPlatform = hass.data[DOMAIN][entry.entry_id]["platform"]
    async_add_entities(
        [
            KefSpeakerMediaPlayer(platform.accessories[uid], handler)
            for uid, handler in platform.handlers.items()
        ],
        True,
    )


class KefSpeakerMediaPlayer(MediaPlayerEntity):
    """Media player backed by the characteristic store of one accessory."""

    _attr_supported_features = SUPPORTED_FEATURES
    _attr_has_entity_name = False
    _attr_source_list = [source.value for source in SpeakerSource]

    def __init__(self, record: AccessoryRecord, handler: AccessoryHandler) -> None:
        self._record = record
        self._handler = handler
        self._attr_unique_id = record.uid
        self._attr_name = record.name

    @property
    def _store(self) -> CharacteristicStore:
        return self._handler.sink

    async def async_added_to_hass(self) -> None:
        await super().async_added_to_hass()
        self.async_on_remove(self._store.async_add_listener(self.async_write_ha_state))

    async def async_update(self) -> None:
        await self._handler.async_refresh()

    @property
    def available(self) -> bool:
        return self._handler.last_poll_success

    @property
    def state(self) -> MediaPlayerState | None:
        power = self._store.get(Characteristic.POWER)
        if power is None:
            return None
        if not power:
            return MediaPlayerState.OFF
        if self._store.get(Characteristic.PLAYING):
            return MediaPlayerState.PLAYING
        return MediaPlayerState.ON

    @property
    def volume_level(self) -> float | None:
        volume = self._store.get(Characteristic.VOLUME)
        if volume is None:
            return None
        return volume / 100

    @property
    def is_volume_muted(self) -> bool | None:
        volume = self._store.get(Characteristic.VOLUME)
        if volume is None:
            return None
        return volume == 0

    @property
    def source(self) -> str | None:
        source = self._store.get(Characteristic.SOURCE)
        if not source or source == UNKNOWN_SOURCE:
            return None
        return source

    @property
    def device_info(self) -> DeviceInfo:
        return DeviceInfo(
            identifiers={(DOMAIN, self._record.uid)},
            manufacturer=MANUFACTURER,
            model=self._record.model or None,
            name=self._record.name,
        )

    async def async_turn_on(self) -> None:
        await self._handler.async_set_power(True)
        await self._handler.async_refresh()

    async def async_turn_off(self) -> None:
        await self._handler.async_set_power(False)
        await self._handler.async_refresh()

    async def async_mute_volume(self, mute: bool) -> None:
        await self._handler.async_set_mute(mute)
        await self._handler.async_refresh()

    async def async_set_volume_level(self, volume: float) -> None:
        volume_value = max(0, min(100, round(volume * 100)))
        await self._handler.async_set_volume(volume_value)
        await self._handler.async_refresh()

    async def async_select_source(self, source: str) -> None:
        await self._handler.async_set_source(source.lower())
        await self._handler.async_refresh()

    async def async_media_play(self) -> None:
        if not await self._handler.async_get_playing():
            await self.async_media_play_pause()

    async def async_media_pause(self) -> None:
        if await self._handler.async_get_playing():
            await self.async_media_play_pause()

    async def async_media_play_pause(self) -> None:
        await self._handler.async_toggle_play_pause()
        await self._handler.async_refresh()
