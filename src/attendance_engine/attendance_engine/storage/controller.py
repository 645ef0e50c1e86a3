from __future__ import annotations

from flask import Flask, send_from_directory
from werkzeug.exceptions import HTTPException

from ..common.http import current_actor, error_response, login_required
from ..container import Container
from ..core.exceptions import AuthorizationError


def register(app: Flask, container: Container) -> None:
    """Serve locally stored photos at the URLs ``LocalPhotoStorage.save`` hands out."""
    storage = container.photo_storage
    if storage is None or not storage.base_url.startswith("/"):
        return

    @app.route(f"{storage.base_url}/<bucket>/<int:owner_id>/<path:filename>", methods=["GET"], endpoint="stored_photo")
    @login_required
    def stored_photo(bucket, owner_id, filename):
        try:
            actor = current_actor()
            if not actor.is_admin and actor.employee_id != owner_id:
                raise AuthorizationError("You can only view your own photos")
            return send_from_directory(storage.root.resolve() / bucket / str(owner_id), filename)
        except HTTPException:
            raise
        except Exception as e:
            return error_response(e)
