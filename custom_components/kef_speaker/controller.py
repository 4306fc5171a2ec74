"""Reconcile configured KEF speakers against the accessories the host remembers."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol
import logging

from .accessory import AccessoryHandler
from .models import AccessoryRecord, SpeakerConfig, accessory_id

_LOGGER = logging.getLogger(__name__)

HandlerFactory = Callable[[AccessoryRecord, SpeakerConfig], AccessoryHandler]


class AccessoryRegistry(Protocol):
    """Host-side store of accessory records."""

    def upsert(self, record: AccessoryRecord) -> None:
        ...

    def remove(self, record: AccessoryRecord) -> None:
        ...


class SpeakerPlatform:
    """Own the configured speakers and their accessory handlers."""

    def __init__(
        self,
        registry: AccessoryRegistry,
        handler_factory: HandlerFactory,
        logger: logging.Logger | None = None,
    ) -> None:
        self._registry = registry
        self._handler_factory = handler_factory
        self._logger = logger or _LOGGER
        self.accessories: dict[str, AccessoryRecord] = {}
        self.handlers: dict[str, AccessoryHandler] = {}
        self.discovered_ids: list[str] = []

    def configure_accessory(self, record: AccessoryRecord) -> None:
        """Track an accessory restored from the host cache."""

        self._logger.info("Loading accessory from cache: %s", record.display_name)
        self.accessories[record.uid] = record

    def discover_devices(self, speakers: list[SpeakerConfig] | None) -> None:
        if speakers is None:
            self._logger.error("No speakers configured!")
            return

        self.discovered_ids = []
        for speaker in speakers:
            uid = accessory_id(speaker.address)
            self.discovered_ids.append(uid)

            record = self.accessories.get(uid)
            if record is not None:
                self._logger.info("Restoring existing accessory from cache: %s", record.display_name)
                record.context["name"] = speaker.name
                record.context["model"] = speaker.model
                self._attach_handler(record, speaker)
                self._registry.upsert(record)
            else:
                self._logger.info("Adding new accessory: %s", speaker.name)
                record = AccessoryRecord(uid=uid, display_name=speaker.name)
                record.context["name"] = speaker.name
                record.context["model"] = speaker.model
                self._attach_handler(record, speaker)
                self.accessories[uid] = record
                self._registry.upsert(record)

        for uid, record in list(self.accessories.items()):
            if uid in self.discovered_ids:
                continue
            self._detach_handler(uid)
            del self.accessories[uid]
            self._registry.remove(record)
            self._logger.info("Removing existing accessory from cache: %s", record.display_name)

    def shutdown(self) -> None:
        """Stop polling every speaker this platform started."""

        for uid in list(self.handlers):
            self._detach_handler(uid)

    def _attach_handler(self, record: AccessoryRecord, speaker: SpeakerConfig) -> None:
        self._detach_handler(record.uid)
        self.handlers[record.uid] = self._handler_factory(record, speaker)

    def _detach_handler(self, uid: str) -> None:
        handler = self.handlers.pop(uid, None)
        if handler is not None:
            handler.stop()
