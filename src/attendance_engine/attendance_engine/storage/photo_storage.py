from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Protocol

from ..common.validators import PhotoPayload
from ..core.exceptions import DependencyFailure

logger = logging.getLogger(__name__)

_EXTENSIONS = {"image/jpeg": "jpg", "image/jpg": "jpg", "image/png": "png", "image/webp": "webp"}


class PhotoStorage(Protocol):
    """External object storage. Returns a retrievable URL for the stored photo."""

    def save(self, *, bucket: str, key: str, photo: PhotoPayload) -> str:
        raise NotImplementedError

    def delete(self, *, bucket: str, key: str) -> None:
        """Remove a stored photo; a missing photo is not an error."""
        raise NotImplementedError


def photo_key(*, owner_id: int, kind: str, at: datetime, photo: PhotoPayload) -> str:
    ext = _EXTENSIONS.get(photo.mime_type, "jpg")
    return f"{int(owner_id)}/{kind}_{int(at.timestamp() * 1000)}.{ext}"


class LocalPhotoStorage(PhotoStorage):
    """Stores photos under a directory and serves them from ``base_url``.

    Meant for development; production deployments plug in their object store.
    """

    def __init__(self, root_dir: str | Path, *, base_url: str = "/photos"):
        self._root = Path(root_dir)
        self._base_url = base_url.rstrip("/")

    @property
    def root(self) -> Path:
        return self._root

    @property
    def base_url(self) -> str:
        return self._base_url

    def path_for(self, bucket: str, key: str) -> Path:
        target = (self._root / bucket / key).resolve()
        if self._root.resolve() not in target.parents:
            raise ValueError(f"Photo key escapes storage root: {key!r}")
        return target

    def save(self, *, bucket: str, key: str, photo: PhotoPayload) -> str:
        target = self.path_for(bucket, key)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(photo.content)
        except OSError as e:
            logger.error("storing photo %s/%s failed: %s", bucket, key, e)
            raise DependencyFailure("Photo storage unavailable") from e
        return f"{self._base_url}/{bucket}/{key}"

    def delete(self, *, bucket: str, key: str) -> None:
        try:
            self.path_for(bucket, key).unlink(missing_ok=True)
        except OSError as e:
            logger.error("deleting photo %s/%s failed: %s", bucket, key, e)
            raise DependencyFailure("Photo storage unavailable") from e
