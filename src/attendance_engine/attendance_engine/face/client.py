from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import requests

from ..common.validators import PhotoPayload
from ..core.constants import MIN_FACE_QUALITY
from ..core.exceptions import DependencyFailure, FaceDetectionFailed
from .model import FaceDetection

logger = logging.getLogger(__name__)


class FaceRecognizer(Protocol):
    """External face-recognition service.

    Both calls raise ``FaceDetectionFailed`` when the photo is unusable and
    ``DependencyFailure`` when the service cannot be reached.
    """

    def detect(self, photo: PhotoPayload) -> FaceDetection:
        raise NotImplementedError

    def compare(self, face_token: str, photo: PhotoPayload) -> float:
        """Similarity in [0, 1] between the enrolled face and the photo."""

        raise NotImplementedError


class FacePlusPlusClient(FaceRecognizer):
    """Face++ REST client (``/facepp/v3/detect`` and ``/facepp/v3/compare``)."""

    def __init__(
        self,
        *,
        api_key: str,
        api_secret: str,
        base_url: str = "https://api-us.faceplusplus.com",
        timeout: float = 10.0,
        min_quality: float = MIN_FACE_QUALITY,
        session: Optional[requests.Session] = None,
    ):
        self._api_key = api_key
        self._api_secret = api_secret
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._min_quality = float(min_quality)
        self._session = session or requests.Session()

    def _post(self, path: str, data: dict[str, Any]) -> dict:
        if not self._api_key or not self._api_secret:
            raise DependencyFailure("Face recognition service is not configured")

        payload = {"api_key": self._api_key, "api_secret": self._api_secret, **data}
        try:
            response = self._session.post(f"{self._base_url}{path}", data=payload, timeout=self._timeout)
        except requests.RequestException as e:
            logger.error("face service request to %s failed: %s", path, e)
            raise DependencyFailure("Face verification service unavailable") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        error_message = body.get("error_message") if isinstance(body, dict) else None
        if error_message:
            # Face++ reports unusable images (bad size, no face for a token) as 4xx with a message.
            if response.status_code < 500 and not error_message.startswith(("AUTHENTICATION", "AUTHORIZATION", "CONCURRENCY")):
                raise FaceDetectionFailed(error_message)
            logger.error("face service %s error %s: %s", path, response.status_code, error_message)
            raise DependencyFailure("Face verification service unavailable")

        if not response.ok:
            logger.error("face service %s returned HTTP %s", path, response.status_code)
            raise DependencyFailure("Face verification service unavailable")
        return body

    def detect(self, photo: PhotoPayload) -> FaceDetection:
        body = self._post(
            "/facepp/v3/detect",
            {"image_base64": photo.base64_body, "return_attributes": "facequality"},
        )
        faces = body.get("faces") or []
        if not faces:
            raise FaceDetectionFailed("No face detected")
        if len(faces) > 1:
            raise FaceDetectionFailed("More than one face detected. Make sure only one face is visible.")

        face = faces[0]
        quality = float(((face.get("attributes") or {}).get("facequality") or {}).get("value") or 0)
        if quality < self._min_quality:
            raise FaceDetectionFailed("Photo quality is too low. Try again with better lighting.")
        return FaceDetection(face_token=face["face_token"], quality=quality)

    def compare(self, face_token: str, photo: PhotoPayload) -> float:
        body = self._post(
            "/facepp/v3/compare",
            {"face_token1": face_token, "image_base64_2": photo.base64_body},
        )
        if "confidence" not in body:
            # No face found in the live photo.
            raise FaceDetectionFailed("No face detected")
        # Face++ reports confidence on a 0-100 scale.
        return max(0.0, min(1.0, float(body["confidence"]) / 100.0))
