from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import admin_required, current_actor, error_response, json_body, login_required, to_jsonable
from ..common.validators import require_positive_int
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError


def _verification_json(decision) -> dict:
    return {
        "face_verified": decision.face.verified,
        "face_similarity": round(decision.face.score, 4),
        "location_verified": decision.geofence.verified,
        "distance_meters": round(decision.geofence.distance_meters),
    }


def _optional_int(value: Optional[str], name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return require_positive_int(value, name)


def _optional_status(value: Optional[str]) -> Optional[AttendanceStatus]:
    if not value or value == "all":
        return None
    try:
        return AttendanceStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown attendance status: {value!r}")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @login_required
    def attendance_check_in():
        try:
            body = json_body()
            result = container.attendance_service.check_in(
                actor=current_actor(),
                employee_id=body.get("employee_id"),
                latitude=body.get("latitude"),
                longitude=body.get("longitude"),
                photo_base64=body.get("photo_base64"),
            )
            return jsonify(
                {
                    "success": True,
                    "data": to_jsonable(result.record),
                    "message": result.message,
                    "warnings": _verification_json(result.decision),
                }
            )
        except Exception as e:
            return error_response(e)

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @login_required
    def attendance_check_out():
        try:
            body = json_body()
            result = container.attendance_service.check_out(
                actor=current_actor(),
                employee_id=body.get("employee_id"),
                latitude=body.get("latitude"),
                longitude=body.get("longitude"),
                photo_base64=body.get("photo_base64"),
            )
            return jsonify(
                {
                    "success": True,
                    "data": to_jsonable(result.record),
                    "message": result.message,
                    "summary": {
                        "work_duration": result.work_duration,
                        "work_duration_minutes": result.decision.work_duration_minutes,
                        "early_leave_minutes": result.decision.early_leave_minutes,
                    },
                    "warnings": _verification_json(result.decision),
                }
            )
        except Exception as e:
            return error_response(e)

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def attendance_today():
        try:
            record = container.attendance_service.get_today(
                actor=current_actor(),
                employee_id=_optional_int(request.args.get("employee_id"), "employee_id"),
            )
            return jsonify({"success": True, "data": to_jsonable(record) if record else None})
        except Exception as e:
            return error_response(e)

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def attendance_history():
        try:
            rows = container.attendance_service.get_history(
                actor=current_actor(),
                employee_id=_optional_int(request.args.get("employee_id"), "employee_id"),
                limit=_optional_int(request.args.get("limit"), "limit") or DEFAULT_HISTORY_LIMIT,
            )
            return jsonify({"success": True, "data": to_jsonable(list(rows))})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/attendance/all", methods=["GET"], endpoint="admin_attendance_all")
    @admin_required
    def admin_attendance_all():
        try:
            rows = container.attendance_service.list_between(
                actor=current_actor(),
                start_date=parse_iso_date(request.args.get("start_date", "")),
                end_date=parse_iso_date(request.args.get("end_date", "")),
                employee_id=_optional_int(request.args.get("employee_id"), "employee_id"),
                status=_optional_status(request.args.get("status")),
            )
            return jsonify({"success": True, "data": to_jsonable(list(rows))})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/attendance/summary", methods=["GET"], endpoint="admin_attendance_summary")
    @admin_required
    def admin_attendance_summary():
        try:
            summary = container.attendance_service.summarize(
                actor=current_actor(),
                start_date=parse_iso_date(request.args.get("start_date", "")),
                end_date=parse_iso_date(request.args.get("end_date", "")),
                employee_id=_optional_int(request.args.get("employee_id"), "employee_id"),
            )
            return jsonify({"success": True, "data": to_jsonable(summary)})
        except Exception as e:
            return error_response(e)

    @app.route("/api/admin/analytics", methods=["GET"], endpoint="admin_analytics")
    @admin_required
    def admin_analytics():
        try:
            analytics = container.attendance_service.analytics(
                actor=current_actor(),
                period=request.args.get("period", "today"),
            )
            return jsonify({"success": True, "period": analytics.period, "data": to_jsonable(analytics)})
        except Exception as e:
            return error_response(e)
