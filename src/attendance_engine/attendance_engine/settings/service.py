from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Optional

from ..common.actor import Actor
from ..common.datetime_utils import now_utc, parse_time_of_day
from ..common.validators import require_non_empty, require_number, require_positive_int, validate_coordinates
from ..core.constants import MAX_GEOFENCE_RADIUS_METERS, MIN_GEOFENCE_RADIUS_METERS
from ..core.exceptions import AuthorizationError, ConcurrentUpdate, NotFoundError, ValidationError
from .model import OfficeSettings
from .repository import OfficeSettingsRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "office_name",
    "office_address",
    "latitude",
    "longitude",
    "radius_meters",
    "default_check_in",
    "default_check_out",
    "late_tolerance_minutes",
    "face_similarity_threshold",
)


class OfficeSettingsService:
    def __init__(self, settings: OfficeSettingsRepository, *, clock: Callable[[], datetime] = now_utc):
        self._settings = settings
        self._clock = clock

    def get_active(self) -> OfficeSettings:
        current = self._settings.get_active()
        if not current:
            raise NotFoundError("Office settings are not configured")
        return current

    def update(self, *, actor: Actor, changes: dict[str, Any], expected_version: Optional[int] = None) -> OfficeSettings:
        if not actor.is_admin:
            raise AuthorizationError("Forbidden - Admin access required")

        updates = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        if not updates:
            raise ValidationError("No valid fields to update")

        current = self.get_active()
        if expected_version is not None and require_positive_int(expected_version, "version") != current.version:
            raise ConcurrentUpdate("Office settings were changed by someone else; reload and retry")

        updated = self._apply(current, updates)
        updated = replace(updated, version=current.version + 1, updated_at=self._clock())

        if not self._settings.save(updated, expected_version=current.version):
            raise ConcurrentUpdate("Office settings were changed by someone else; reload and retry")

        logger.info(
            "office settings updated to version %s by employee %s (fields: %s)",
            updated.version,
            actor.employee_id,
            ", ".join(sorted(updates)),
        )
        return updated

    @staticmethod
    def _apply(current: OfficeSettings, updates: dict[str, Any]) -> OfficeSettings:
        values: dict[str, Any] = {}

        if "office_name" in updates:
            values["office_name"] = require_non_empty(updates["office_name"], "office_name")
        if "office_address" in updates:
            values["office_address"] = (str(updates["office_address"] or "")).strip() or None

        if "latitude" in updates or "longitude" in updates:
            coords = validate_coordinates(
                updates.get("latitude", current.latitude),
                updates.get("longitude", current.longitude),
            )
            values["latitude"] = coords.latitude
            values["longitude"] = coords.longitude

        if "radius_meters" in updates:
            radius = require_number(updates["radius_meters"], "radius_meters")
            if not MIN_GEOFENCE_RADIUS_METERS <= radius <= MAX_GEOFENCE_RADIUS_METERS:
                raise ValidationError(
                    f"Radius must be between {MIN_GEOFENCE_RADIUS_METERS} and {MAX_GEOFENCE_RADIUS_METERS} meters"
                )
            values["radius_meters"] = int(radius)

        if "default_check_in" in updates:
            values["default_check_in"] = parse_time_of_day(str(updates["default_check_in"]))
        if "default_check_out" in updates:
            values["default_check_out"] = parse_time_of_day(str(updates["default_check_out"]))

        if "late_tolerance_minutes" in updates:
            tolerance = require_number(updates["late_tolerance_minutes"], "late_tolerance_minutes")
            if tolerance < 0 or tolerance != int(tolerance):
                raise ValidationError("late_tolerance_minutes must be a non-negative whole number")
            values["late_tolerance_minutes"] = int(tolerance)

        if "face_similarity_threshold" in updates:
            threshold = require_number(updates["face_similarity_threshold"], "face_similarity_threshold")
            if not 0.0 <= threshold <= 1.0:
                raise ValidationError("face_similarity_threshold must be between 0 and 1")
            values["face_similarity_threshold"] = threshold

        updated = replace(current, **values)
        if updated.default_check_out <= updated.default_check_in:
            raise ValidationError("default_check_out must be later than default_check_in")
        return updated
