"""Config flow for the KEF speaker integration."""

from __future__ import annotations

from typing import Any

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.config_entries import ConfigFlowResult
from homeassistant.core import HomeAssistant
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .client import KefSpeakerClient, KefSpeakerError, PlayerStatus
from .const import (
    CONF_IP,
    CONF_MODEL,
    CONF_POLLING_INTERVAL,
    CONF_SPEAKERS,
    DEFAULT_POLL_INTERVAL,
    DOMAIN,
)
from .models import CONF_NAME, SpeakerConfig, parse_speakers

TITLE = "KEF speakers"


async def _async_validate_input(hass: HomeAssistant, host: str) -> PlayerStatus:
    session = async_get_clientsession(hass)
    client = KefSpeakerClient(session, host)
    return await client.async_get_player_status()


class KefSpeakerConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle the config flow."""

    VERSION = 1

    async def async_step_import(self, import_data: dict[str, Any]) -> ConfigFlowResult:
        speakers = parse_speakers(import_data.get(CONF_SPEAKERS))
        data: dict[str, Any] = {}
        if speakers is not None:
            data[CONF_SPEAKERS] = [speaker.as_dict() for speaker in speakers]
        await self.async_set_unique_id(DOMAIN)
        self._abort_if_unique_id_configured(updates=data)
        return self.async_create_entry(title=TITLE, data=data)

    async def async_step_user(self, user_input: dict | None = None) -> ConfigFlowResult:
        errors: dict[str, str] = {}

        if user_input is not None:
            try:
                speaker = SpeakerConfig.from_dict(user_input)
            except vol.Invalid:
                errors["base"] = "invalid_speaker"
            else:
                try:
                    await _async_validate_input(self.hass, speaker.address)
                except KefSpeakerError:
                    errors["base"] = "cannot_connect"
                else:
                    return await self._async_add_speaker(speaker)

        data_schema = vol.Schema(
            {
                vol.Required(CONF_NAME): str,
                vol.Required(CONF_IP): str,
                vol.Optional(CONF_MODEL, default=""): str,
                vol.Optional(CONF_POLLING_INTERVAL, default=DEFAULT_POLL_INTERVAL): int,
            }
        )
        return self.async_show_form(step_id="user", data_schema=data_schema, errors=errors)

    async def _async_add_speaker(self, speaker: SpeakerConfig) -> ConfigFlowResult:
        await self.async_set_unique_id(DOMAIN)
        entry = self.hass.config_entries.async_entry_for_domain_unique_id(DOMAIN, DOMAIN)
        if entry is None:
            return self.async_create_entry(
                title=TITLE,
                data={CONF_SPEAKERS: [speaker.as_dict()]},
            )

        existing = [
            item
            for item in entry.data.get(CONF_SPEAKERS, [])
            if SpeakerConfig.from_dict(item).uid != speaker.uid
        ]
        return self.async_update_reload_and_abort(
            entry,
            data={**entry.data, CONF_SPEAKERS: [*existing, speaker.as_dict()]},
            reason="speaker_added",
        )
