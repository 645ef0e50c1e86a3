from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional


@dataclass(frozen=True)
class OfficeSettings:
    """Versioned office configuration.

    Passed explicitly into the evaluator for every request; ``version`` grows by one
    on each admin update and guards concurrent edits.
    """

    settings_id: int
    version: int
    office_name: str
    latitude: float
    longitude: float
    radius_meters: int
    default_check_in: time
    default_check_out: time
    late_tolerance_minutes: int
    face_similarity_threshold: float
    office_address: Optional[str] = None
    updated_at: Optional[datetime] = None
