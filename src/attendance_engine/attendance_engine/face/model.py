from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FaceDetection:
    face_token: str
    quality: float
