"""Configuration and accessory records for the KEF speaker integration."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any
import uuid

import voluptuous as vol

from .const import (
    CONF_IP,
    CONF_MODEL,
    CONF_POLLING_INTERVAL,
    DEFAULT_POLL_INTERVAL,
    DOMAIN,
)

CONF_NAME = "name"

_ACCESSORY_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_DNS, DOMAIN)


def _poll_interval(value: Any) -> int:
    # 0 and missing both mean "use the default"
    if value in (None, 0, "0", ""):
        return DEFAULT_POLL_INTERVAL
    return vol.All(vol.Coerce(int), vol.Range(min=1))(value)


SPEAKER_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_NAME): vol.All(str, vol.Length(min=1)),
        vol.Required(CONF_IP): vol.All(str, vol.Strip, vol.Length(min=1)),
        vol.Optional(CONF_MODEL, default=""): str,
        vol.Optional(CONF_POLLING_INTERVAL, default=DEFAULT_POLL_INTERVAL): _poll_interval,
    },
    extra=vol.REMOVE_EXTRA,
)


def accessory_id(address: str) -> str:
    """Return the stable accessory identifier for a speaker address."""

    return str(uuid.uuid5(_ACCESSORY_NAMESPACE, address))


@dataclass(slots=True, frozen=True)
class SpeakerConfig:
    """One configured speaker."""

    name: str
    address: str
    model: str = ""
    poll_interval: int = DEFAULT_POLL_INTERVAL

    @property
    def uid(self) -> str:
        return accessory_id(self.address)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SpeakerConfig:
        validated = SPEAKER_SCHEMA(dict(data))
        return cls(
            name=validated[CONF_NAME],
            address=validated[CONF_IP],
            model=validated[CONF_MODEL],
            poll_interval=validated[CONF_POLLING_INTERVAL],
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            CONF_NAME: self.name,
            CONF_IP: self.address,
            CONF_MODEL: self.model,
            CONF_POLLING_INTERVAL: self.poll_interval,
        }


def parse_speakers(raw: Iterable[Mapping[str, Any]] | None) -> list[SpeakerConfig] | None:
    """Parse the configured speaker list, keeping None when it is absent."""

    if raw is None:
        return None
    return [SpeakerConfig.from_dict(item) for item in raw]


@dataclass(slots=True)
class AccessoryRecord:
    """Accessory known to the host, created once and reused across restarts."""

    uid: str
    display_name: str
    context: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.context.get("name") or self.display_name

    @property
    def model(self) -> str:
        return self.context.get("model") or ""
