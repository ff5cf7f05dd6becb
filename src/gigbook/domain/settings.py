"""Settings use cases."""

import logging
from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Optional, Union

from gigbook.database.base import SettingsRepository
from gigbook.domain.entities import Settings
from gigbook.domain.errors import ValidationError
from gigbook.domain.usecase import UseCase

logger = logging.getLogger(__name__)

Number = Union[Decimal, int, float, str]


def load_settings(repository: SettingsRepository) -> Settings:
    """Return stored settings, creating and saving the defaults on first use."""
    settings = repository.find()
    if settings is None:
        settings = Settings.create_default()
        repository.save(settings)
        logger.info("Created default settings")
    return settings


@dataclass
class UpdateSettingsInput:
    """Fields to change; None leaves a field untouched."""

    rate_km: Optional[Number] = None
    rate_travel_time: Optional[Number] = None
    default_reimbursement_days: Optional[int] = None
    max_hotel_rate: Optional[Number] = None
    standard_daily_rate: Optional[Number] = None
    overtime_rate: Optional[Number] = None

    def changes(self) -> dict:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


class GetSettings(UseCase):
    """Read the current settings."""

    def __init__(self, settings_repository: SettingsRepository):
        self.settings_repository = settings_repository

    def _run(self) -> Settings:
        return load_settings(self.settings_repository)


class UpdateSettings(UseCase):
    """Change rates and defaults.

    Existing transactions keep the amounts computed when they were created.
    """

    def __init__(self, settings_repository: SettingsRepository):
        self.settings_repository = settings_repository

    def _run(self, data: UpdateSettingsInput) -> Settings:
        if data is None:
            raise ValidationError("Settings input is required")
        changes = data.changes()
        if not changes:
            raise ValidationError("At least one setting must be provided")

        settings = load_settings(self.settings_repository)
        settings.update(**changes)
        return self.settings_repository.save(settings)
