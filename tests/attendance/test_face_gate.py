import pytest

from src.attendance_engine.attendance_engine.attendance.face_gate import evaluate_face_match
from src.attendance_engine.attendance_engine.core.exceptions import ValidationError


def test_score_below_threshold_is_rejected():
    assert evaluate_face_match(0.79, 0.80).verified is False


def test_score_equal_to_threshold_is_accepted():
    match = evaluate_face_match(0.80, 0.80)

    assert match.verified is True
    assert match.score == 0.80
    assert match.threshold == 0.80


def test_score_above_threshold_is_accepted():
    assert evaluate_face_match(0.95, 0.80).verified is True


@pytest.mark.parametrize("score, threshold", [(-0.1, 0.8), (1.01, 0.8), (0.5, 1.5), (0.5, -0.2)])
def test_out_of_range_values_are_invalid(score, threshold):
    with pytest.raises(ValidationError):
        evaluate_face_match(score, threshold)
