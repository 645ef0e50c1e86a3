from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, from_db_utc, normalize_mysql_time, to_db_utc
from .model import OfficeSettings
from .repository import OfficeSettingsRepository


class MySQLOfficeSettingsRepository(OfficeSettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active(self) -> Optional[OfficeSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT settings_id, version, office_name, office_address, latitude, longitude,
                       radius_meters, default_check_in, default_check_out,
                       late_tolerance_minutes, face_similarity_threshold, updated_at
                FROM office_settings
                ORDER BY settings_id ASC
                LIMIT 1
                """
            )
            r = fetchone(cur)
            if not r:
                return None
            return OfficeSettings(
                settings_id=int(r["settings_id"]),
                version=int(r["version"]),
                office_name=r["office_name"],
                office_address=r.get("office_address"),
                latitude=float(r["latitude"]),
                longitude=float(r["longitude"]),
                radius_meters=int(r["radius_meters"]),
                default_check_in=normalize_mysql_time(r["default_check_in"]),
                default_check_out=normalize_mysql_time(r["default_check_out"]),
                late_tolerance_minutes=int(r["late_tolerance_minutes"]),
                face_similarity_threshold=float(r["face_similarity_threshold"]),
                updated_at=from_db_utc(r.get("updated_at")),
            )

    def save(self, settings: OfficeSettings, *, expected_version: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE office_settings
                SET version=%s, office_name=%s, office_address=%s, latitude=%s, longitude=%s,
                    radius_meters=%s, default_check_in=%s, default_check_out=%s,
                    late_tolerance_minutes=%s, face_similarity_threshold=%s, updated_at=%s
                WHERE settings_id=%s AND version=%s
                """,
                (
                    int(settings.version),
                    settings.office_name,
                    settings.office_address,
                    settings.latitude,
                    settings.longitude,
                    int(settings.radius_meters),
                    settings.default_check_in,
                    settings.default_check_out,
                    int(settings.late_tolerance_minutes),
                    settings.face_similarity_threshold,
                    to_db_utc(settings.updated_at),
                    int(settings.settings_id),
                    int(expected_version),
                ),
            )
            return cur.rowcount > 0
