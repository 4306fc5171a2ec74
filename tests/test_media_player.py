"""Tests for the media player entity."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

from homeassistant.components.media_player.const import MediaPlayerState
import pytest

from custom_components.kef_speaker.accessory import (
    AccessoryHandler,
    Characteristic,
    CharacteristicStore,
)
from custom_components.kef_speaker.const import DOMAIN
from custom_components.kef_speaker.media_player import SCAN_INTERVAL, KefSpeakerMediaPlayer
from custom_components.kef_speaker.models import AccessoryRecord


@pytest.fixture
def handler() -> MagicMock:
    mock = MagicMock(spec=AccessoryHandler)
    mock.sink = CharacteristicStore()
    mock.last_poll_success = True
    for name in (
        "async_refresh",
        "async_set_power",
        "async_set_mute",
        "async_set_volume",
        "async_set_source",
        "async_toggle_play_pause",
    ):
        setattr(mock, name, AsyncMock())
    mock.async_get_playing = AsyncMock(return_value=False)
    return mock


@pytest.fixture
def entity(handler: MagicMock) -> KefSpeakerMediaPlayer:
    record = AccessoryRecord("uid-a", "Living Room KEF", {"name": "Living Room KEF", "model": "LS50WII"})
    return KefSpeakerMediaPlayer(record, handler)


class TestState:
    """Properties read from the characteristic store."""

    def test_unknown_before_first_read(self, entity: KefSpeakerMediaPlayer) -> None:
        assert entity.state is None
        assert entity.volume_level is None
        assert entity.is_volume_muted is None
        assert entity.source is None

    def test_power_and_playback(self, entity: KefSpeakerMediaPlayer, handler: MagicMock) -> None:
        handler.sink.set(Characteristic.POWER, False)
        assert entity.state == MediaPlayerState.OFF
        handler.sink.set(Characteristic.POWER, True)
        assert entity.state == MediaPlayerState.ON
        handler.sink.set(Characteristic.PLAYING, True)
        assert entity.state == MediaPlayerState.PLAYING

    def test_volume_and_mute(self, entity: KefSpeakerMediaPlayer, handler: MagicMock) -> None:
        handler.sink.set(Characteristic.VOLUME, 75)
        assert entity.volume_level == 0.75
        assert entity.is_volume_muted is False
        handler.sink.set(Characteristic.VOLUME, 0)
        assert entity.is_volume_muted is True

    def test_source(self, entity: KefSpeakerMediaPlayer, handler: MagicMock) -> None:
        handler.sink.set(Characteristic.SOURCE, "unknown")
        assert entity.source is None
        handler.sink.set(Characteristic.SOURCE, "optical")
        assert entity.source == "optical"
        assert entity.source_list == ["wifi", "bluetooth", "tv", "optical", "coaxial", "analog"]

    def test_identity(self, entity: KefSpeakerMediaPlayer, handler: MagicMock) -> None:
        assert entity.unique_id == "uid-a"
        assert entity.device_info["identifiers"] == {(DOMAIN, "uid-a")}
        assert entity.device_info["model"] == "LS50WII"
        handler.last_poll_success = False
        assert entity.available is False


class TestCommands:
    """Service calls forwarded to the accessory handler."""

    @pytest.mark.asyncio
    async def test_turn_on_off(self, entity: KefSpeakerMediaPlayer, handler: MagicMock) -> None:
        await entity.async_turn_on()
        await entity.async_turn_off()
        assert [call.args for call in handler.async_set_power.await_args_list] == [(True,), (False,)]
        assert handler.async_refresh.await_count == 2

    @pytest.mark.asyncio
    async def test_volume_level(self, entity: KefSpeakerMediaPlayer, handler: MagicMock) -> None:
        await entity.async_set_volume_level(0.456)
        handler.async_set_volume.assert_awaited_once_with(46)

    @pytest.mark.asyncio
    async def test_mute(self, entity: KefSpeakerMediaPlayer, handler: MagicMock) -> None:
        await entity.async_mute_volume(True)
        handler.async_set_mute.assert_awaited_once_with(True)

    @pytest.mark.asyncio
    async def test_select_source(self, entity: KefSpeakerMediaPlayer, handler: MagicMock) -> None:
        await entity.async_select_source("Bluetooth")
        handler.async_set_source.assert_awaited_once_with("bluetooth")

    @pytest.mark.asyncio
    async def test_play_only_toggles_when_paused(
        self, entity: KefSpeakerMediaPlayer, handler: MagicMock
    ) -> None:
        handler.async_get_playing.return_value = True
        await entity.async_media_play()
        handler.async_toggle_play_pause.assert_not_awaited()
        await entity.async_media_pause()
        handler.async_toggle_play_pause.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_play_reads_live_state_not_store(
        self, entity: KefSpeakerMediaPlayer, handler: MagicMock
    ) -> None:
        # playback stopped on the device since the last refresh
        handler.sink.set(Characteristic.PLAYING, True)
        handler.async_get_playing.return_value = False
        await entity.async_media_play()
        handler.async_toggle_play_pause.assert_awaited_once()
        await entity.async_media_pause()
        handler.async_toggle_play_pause.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_refreshes(self, entity: KefSpeakerMediaPlayer, handler: MagicMock) -> None:
        await entity.async_update()
        handler.async_refresh.assert_awaited_once()

    def test_entity_polls_for_source_and_playback(self, entity: KefSpeakerMediaPlayer) -> None:
        assert entity.should_poll is True
        assert SCAN_INTERVAL == timedelta(seconds=30)
