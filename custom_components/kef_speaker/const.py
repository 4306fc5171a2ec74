"""Constants for the KEF speaker integration."""

from __future__ import annotations

from homeassistant.const import Platform

DOMAIN = "kef_speaker"
PLATFORMS: list[Platform] = [Platform.MEDIA_PLAYER]
MANUFACTURER = "KEF"
DEFAULT_PORT = 50001
DEFAULT_POLL_INTERVAL = 10

CONF_SPEAKERS = "speakers"
CONF_IP = "ip"
CONF_MODEL = "model"
CONF_POLLING_INTERVAL = "polling_interval"
