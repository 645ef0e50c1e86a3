from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import admin_required, current_actor, error_response, json_body, login_required, to_jsonable
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/settings", methods=["GET"], endpoint="office_settings_get")
    @login_required
    def office_settings_get():
        try:
            settings = container.settings_service.get_active()
            return jsonify({"success": True, "data": to_jsonable(settings)})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/settings", methods=["PATCH"], endpoint="office_settings_update")
    @admin_required
    def office_settings_update():
        try:
            body = json_body()
            expected_version = body.pop("version", None)
            settings = container.settings_service.update(
                actor=current_actor(),
                changes=body,
                expected_version=expected_version,
            )
            return jsonify(
                {
                    "success": True,
                    "message": "Office settings updated successfully",
                    "data": to_jsonable(settings),
                }
            )
        except Exception as e:
            return error_response(e)
