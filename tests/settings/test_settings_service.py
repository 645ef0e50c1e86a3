from __future__ import annotations

from dataclasses import replace
from datetime import datetime, time, timezone

import pytest

from src.attendance_engine.attendance_engine.common.actor import Actor
from src.attendance_engine.attendance_engine.core.enums import Role
from src.attendance_engine.attendance_engine.core.exceptions import (
    AuthorizationError,
    ConcurrentUpdate,
    NotFoundError,
    ValidationError,
)
from src.attendance_engine.attendance_engine.settings.model import OfficeSettings
from src.attendance_engine.attendance_engine.settings.service import OfficeSettingsService

NOW = datetime(2025, 3, 3, 2, 0, tzinfo=timezone.utc)
ADMIN = Actor(employee_id=1, role=Role.ADMIN)

INITIAL = OfficeSettings(
    settings_id=1,
    version=1,
    office_name="Head Office",
    latitude=-6.2088,
    longitude=106.8456,
    radius_meters=100,
    default_check_in=time(8, 0),
    default_check_out=time(17, 0),
    late_tolerance_minutes=15,
    face_similarity_threshold=0.8,
)


class FakeSettingsRepo:
    def __init__(self, settings):
        self.current = settings

    def get_active(self):
        return self.current

    def save(self, settings, *, expected_version):
        if self.current.version != expected_version:
            return False
        self.current = settings
        return True


@pytest.fixture
def repo():
    return FakeSettingsRepo(INITIAL)


@pytest.fixture
def service(repo):
    return OfficeSettingsService(repo, clock=lambda: NOW)


def test_update_bumps_version(service, repo):
    updated = service.update(actor=ADMIN, changes={"radius_meters": 150, "default_check_in": "08:30"})

    assert updated.version == 2
    assert updated.radius_meters == 150
    assert updated.default_check_in == time(8, 30)
    assert updated.updated_at == NOW
    assert repo.current == updated


def test_update_with_stale_version_is_rejected(service, repo):
    with pytest.raises(ConcurrentUpdate):
        service.update(actor=ADMIN, changes={"radius_meters": 150}, expected_version=7)
    assert repo.current == INITIAL


def test_update_lost_to_concurrent_writer():
    class RacingRepo(FakeSettingsRepo):
        def save(self, settings, *, expected_version):
            return False

    racing = OfficeSettingsService(RacingRepo(INITIAL), clock=lambda: NOW)
    with pytest.raises(ConcurrentUpdate):
        racing.update(actor=ADMIN, changes={"office_name": "HQ"})


@pytest.mark.parametrize(
    "changes",
    [
        {"radius_meters": 5},
        {"radius_meters": 1001},
        {"face_similarity_threshold": 1.2},
        {"latitude": 95},
        {"default_check_in": "8am"},
        {"default_check_out": "07:00"},
        {"late_tolerance_minutes": -1},
        {"office_name": ""},
        {"unknown_field": 1},
    ],
)
def test_invalid_updates(service, repo, changes):
    with pytest.raises(ValidationError):
        service.update(actor=ADMIN, changes=changes)
    assert repo.current == INITIAL


def test_only_admin_can_update(service):
    with pytest.raises(AuthorizationError):
        service.update(actor=Actor(employee_id=2, role=Role.EMPLOYEE), changes={"radius_meters": 150})


def test_missing_settings(service, repo):
    repo.current = None
    with pytest.raises(NotFoundError):
        service.get_active()


def test_threshold_change_is_versioned(service):
    updated = service.update(actor=ADMIN, changes={"face_similarity_threshold": 0.75}, expected_version=1)

    assert updated == replace(INITIAL, face_similarity_threshold=0.75, version=2, updated_at=NOW)
