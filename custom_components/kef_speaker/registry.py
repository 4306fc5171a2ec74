"""Home Assistant device registry used as the accessory cache."""

from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers import device_registry as dr

from .const import DOMAIN, MANUFACTURER
from .models import AccessoryRecord

_LOGGER = logging.getLogger(__name__)


class DeviceAccessoryRegistry:
    """Store one device per speaker, keyed by its accessory identifier."""

    def __init__(self, hass: HomeAssistant, entry: ConfigEntry) -> None:
        self._hass = hass
        self._entry = entry

    def restore(self) -> list[AccessoryRecord]:
        """Return the records left behind by a previous run."""

        registry = dr.async_get(self._hass)
        records: list[AccessoryRecord] = []
        for device in dr.async_entries_for_config_entry(registry, self._entry.entry_id):
            uid = next((value for domain, value in device.identifiers if domain == DOMAIN), None)
            if uid is None:
                continue
            name = device.name or uid
            records.append(
                AccessoryRecord(
                    uid=uid,
                    display_name=name,
                    context={"name": name, "model": device.model or ""},
                )
            )
        return records

    def upsert(self, record: AccessoryRecord) -> None:
        registry = dr.async_get(self._hass)
        registry.async_get_or_create(
            config_entry_id=self._entry.entry_id,
            identifiers={(DOMAIN, record.uid)},
            manufacturer=MANUFACTURER,
            model=record.model or None,
            name=record.name,
        )

    def remove(self, record: AccessoryRecord) -> None:
        registry = dr.async_get(self._hass)
        device = registry.async_get_device(identifiers={(DOMAIN, record.uid)})
        if device is None:
            _LOGGER.debug("No device registered for %s", record.display_name)
            return
        registry.async_remove_device(device.id)
