from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import admin_required, current_actor, error_response, json_body, login_required, to_jsonable
from ..common.validators import require_positive_int
from ..container import Container
from .model import Employee


def _employee_json(employee: Employee) -> dict:
    data = to_jsonable(employee)
    data.pop("face_token", None)
    data["is_face_enrolled"] = employee.is_face_enrolled
    return data


def register(app: Flask, container: Container) -> None:
    @app.route("/api/employees", methods=["GET"], endpoint="employees_list")
    @admin_required
    def employees_list():
        try:
            active_param = (request.args.get("active") or "").strip().lower()
            active = None
            if active_param in {"1", "true", "yes"}:
                active = True
            elif active_param in {"0", "false", "no"}:
                active = False
            rows = container.employee_service.list(actor=current_actor(), active=active)
            return jsonify({"success": True, "data": [_employee_json(e) for e in rows]})
        except Exception as e:
            return error_response(e)

    @app.route("/api/employees", methods=["POST"], endpoint="employees_create")
    @admin_required
    def employees_create():
        try:
            employee = container.employee_service.create(actor=current_actor(), data=json_body())
            return jsonify({"success": True, "data": _employee_json(employee), "message": "Employee created"}), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/employees/<int:employee_id>", methods=["GET"], endpoint="employees_get")
    @login_required
    def employees_get(employee_id: int):
        try:
            employee = container.employee_service.get_for(actor=current_actor(), employee_id=employee_id)
            return jsonify({"success": True, "data": _employee_json(employee)})
        except Exception as e:
            return error_response(e)

    @app.route("/api/employees/<int:employee_id>", methods=["PATCH"], endpoint="employees_update")
    @admin_required
    def employees_update(employee_id: int):
        try:
            employee = container.employee_service.update(actor=current_actor(), employee_id=employee_id, data=json_body())
            return jsonify({"success": True, "data": _employee_json(employee)})
        except Exception as e:
            return error_response(e)

    @app.route("/api/employees/<int:employee_id>/deactivate", methods=["POST"], endpoint="employees_deactivate")
    @admin_required
    def employees_deactivate(employee_id: int):
        try:
            employee = container.employee_service.deactivate(actor=current_actor(), employee_id=employee_id)
            return jsonify({"success": True, "data": _employee_json(employee), "message": "Employee deactivated"})
        except Exception as e:
            return error_response(e)

    @app.route("/api/employees/<int:employee_id>/activate", methods=["POST"], endpoint="employees_activate")
    @admin_required
    def employees_activate(employee_id: int):
        try:
            employee = container.employee_service.activate(actor=current_actor(), employee_id=employee_id)
            return jsonify({"success": True, "data": _employee_json(employee)})
        except Exception as e:
            return error_response(e)

    @app.route("/api/face/enroll", methods=["POST"], endpoint="face_enroll")
    @login_required
    def face_enroll():
        try:
            body = json_body()
            actor = current_actor()
            employee = container.employee_service.enroll_face(
                actor=actor,
                employee_id=require_positive_int(body.get("employee_id") or actor.employee_id, "employee_id"),
                photo_base64=body.get("photo_base64"),
            )
            return jsonify({"success": True, "data": _employee_json(employee), "message": "Face enrolled successfully"})
        except Exception as e:
            return error_response(e)

    @app.route("/api/face/status/<int:employee_id>", methods=["GET"], endpoint="face_status")
    @login_required
    def face_status(employee_id: int):
        try:
            employee = container.employee_service.get_for(actor=current_actor(), employee_id=employee_id)
            return jsonify(
                {
                    "success": True,
                    "data": {
                        "employee_id": employee.employee_id,
                        "is_face_enrolled": employee.is_face_enrolled,
                        "face_image_url": employee.face_image_url,
                        "face_enrolled_at": to_jsonable(employee.face_enrolled_at),
                    },
                }
            )
        except Exception as e:
            return error_response(e)
