from __future__ import annotations

import logging

from ..common.validators import require_non_empty
from ..core.exceptions import ValidationError
from ..store.entity_store import EntityStore
from .model import SystemSettings
from .repository import SettingsRepository

logger = logging.getLogger(__name__)


class SettingsService:
    def __init__(self, store: EntityStore, settings: SettingsRepository):
        self._store = store
        self._settings = settings

    def get(self) -> SystemSettings:
        return self._store.snapshot.settings

    def replace(self, data: dict) -> SystemSettings:
        """Replace the whole record. Every field must be present."""
        names = SystemSettings.field_names()
        missing = [n for n in names if n not in (data or {})]
        if missing:
            raise ValidationError(
                "Settings must be saved as a whole record",
                errors=[{"field": n, "error": "missing"} for n in missing],
            )

        settings = SystemSettings(**{n: require_non_empty(data[n], n) for n in names})
        self._settings.save(settings)
        self._store.apply(lambda s: s.with_settings(settings))
        logger.info("Settings replaced (%s)", settings.institution_name)
        return settings
