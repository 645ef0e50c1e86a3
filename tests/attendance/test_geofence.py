import pytest

from src.attendance_engine.attendance_engine.attendance.geofence import check_geofence, haversine_meters
from src.attendance_engine.attendance_engine.common.validators import Coordinates

OFFICE = Coordinates(latitude=-6.2088, longitude=106.8456)


def test_haversine_same_point_is_zero():
    assert haversine_meters(-6.2088, 106.8456, -6.2088, 106.8456) == 0


def test_haversine_is_symmetric():
    a = haversine_meters(-6.2088, 106.8456, -6.1754, 106.8272)
    b = haversine_meters(-6.1754, 106.8272, -6.2088, 106.8456)
    assert a == pytest.approx(b)


def test_haversine_one_degree_of_latitude():
    # 2*pi*R / 360
    assert haversine_meters(0.0, 0.0, 1.0, 0.0) == pytest.approx(111_194.93, rel=1e-6)


def test_geofence_inside_radius_is_verified():
    point = Coordinates(latitude=-6.2089, longitude=106.8456)  # ~11 m south
    result = check_geofence(point, OFFICE, 100)

    assert result.verified is True
    assert result.distance_meters == pytest.approx(11.1, abs=0.5)
    assert result.radius_meters == 100


def test_geofence_outside_radius_is_flag_only():
    point = Coordinates(latitude=-6.2188, longitude=106.8456)  # ~1.1 km south
    result = check_geofence(point, OFFICE, 100)

    assert result.verified is False
    assert result.distance_meters > 1000


def test_geofence_boundary_is_inclusive():
    point = Coordinates(latitude=-6.2098, longitude=106.8456)
    distance = haversine_meters(point.latitude, point.longitude, OFFICE.latitude, OFFICE.longitude)

    assert check_geofence(point, OFFICE, distance).verified is True
    assert check_geofence(point, OFFICE, distance - 0.01).verified is False
