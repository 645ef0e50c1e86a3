from __future__ import annotations

from dataclasses import dataclass

from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class FaceMatch:
    score: float
    threshold: float
    verified: bool


def evaluate_face_match(score: float, threshold: float) -> FaceMatch:
    """Pure threshold comparison; the boundary is inclusive."""
    if not 0.0 <= score <= 1.0:
        raise ValidationError(f"Similarity score out of range: {score}")
    if not 0.0 <= threshold <= 1.0:
        raise ValidationError(f"Similarity threshold out of range: {threshold}")
    return FaceMatch(score=score, threshold=threshold, verified=score >= threshold)
