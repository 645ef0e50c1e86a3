from __future__ import annotations

from typing import Optional, Protocol

from .model import OfficeSettings


class OfficeSettingsRepository(Protocol):
    def get_active(self) -> Optional[OfficeSettings]:
        raise NotImplementedError

    def save(self, settings: OfficeSettings, *, expected_version: int) -> bool:
        """Persist ``settings`` only if the stored version still equals ``expected_version``."""

        raise NotImplementedError
