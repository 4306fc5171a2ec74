"""KEF speaker custom integration."""

from __future__ import annotations

from datetime import timedelta
from functools import partial
import logging

import voluptuous as vol

from homeassistant.config_entries import SOURCE_IMPORT, ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryError
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.event import async_track_time_interval
from homeassistant.helpers.typing import ConfigType

from .accessory import AccessoryHandler, CharacteristicStore
from .client import KefSpeakerClient
from .const import CONF_SPEAKERS, DOMAIN, PLATFORMS
from .controller import SpeakerPlatform
from .models import SPEAKER_SCHEMA, AccessoryRecord, SpeakerConfig, parse_speakers
from .registry import DeviceAccessoryRegistry

_LOGGER = logging.getLogger(__name__)

CONFIG_SCHEMA = vol.Schema(
    {
        DOMAIN: vol.Schema(
            {vol.Optional(CONF_SPEAKERS): vol.All(cv.ensure_list, [SPEAKER_SCHEMA])}
        )
    },
    extra=vol.ALLOW_EXTRA,
)


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Import speakers declared in YAML into the config entry."""

    hass.data.setdefault(DOMAIN, {})
    if DOMAIN not in config:
        return True

    hass.async_create_task(
        hass.config_entries.flow.async_init(
            DOMAIN,
            context={"source": SOURCE_IMPORT},
            data=config[DOMAIN],
        )
    )
    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up every configured KEF speaker from a config entry."""

    domain_data = hass.data.setdefault(DOMAIN, {})
    session = async_get_clientsession(hass)

    def build_handler(record: AccessoryRecord, speaker: SpeakerConfig) -> AccessoryHandler:
        client = KefSpeakerClient(session, speaker.address)
        return AccessoryHandler(
            client,
            CharacteristicStore(),
            name=record.name,
            schedule=partial(
                async_track_time_interval,
                hass,
                interval=timedelta(seconds=speaker.poll_interval),
                name=f"KEF speaker poll {speaker.address}",
                cancel_on_shutdown=True,
            ),
            logger=_LOGGER,
        )

    try:
        speakers = parse_speakers(entry.data.get(CONF_SPEAKERS))
    except vol.Invalid as err:
        raise ConfigEntryError(f"Invalid speaker configuration: {err}") from err

    registry = DeviceAccessoryRegistry(hass, entry)
    platform = SpeakerPlatform(registry, build_handler, logger=_LOGGER)
    for record in registry.restore():
        platform.configure_accessory(record)
    platform.discover_devices(speakers)

    domain_data[entry.entry_id] = {"platform": platform}

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""

    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        entry_data = hass.data[DOMAIN].pop(entry.entry_id, None)
        if entry_data:
            entry_data["platform"].shutdown()
    return unload_ok
