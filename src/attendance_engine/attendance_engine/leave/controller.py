from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_utc, parse_iso_date, to_local
from ..common.http import current_actor, error_response, json_body, login_required, to_jsonable
from ..common.validators import require_positive_int
from ..container import Container
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.enums import LeaveRequestStatus
from ..core.exceptions import ValidationError


def _balance_json(balance) -> dict:
    data = to_jsonable(balance)
    data["remaining"] = balance.remaining
    return data


def _optional_int(value: Optional[str], name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return require_positive_int(value, name)


def _optional_status(value: Optional[str]) -> Optional[LeaveRequestStatus]:
    if not value or value == "all":
        return None
    try:
        return LeaveRequestStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown leave request status: {value!r}")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/leave/request", methods=["POST"], endpoint="leave_request_create")
    @login_required
    def leave_request_create():
        try:
            actor = current_actor()
            body = json_body()
            req = container.leave_service.submit(
                actor=actor,
                employee_id=body.get("employee_id", actor.employee_id),
                leave_type_id=body.get("leave_type_id"),
                start_date=parse_iso_date(body.get("start_date") or ""),
                end_date=parse_iso_date(body.get("end_date") or ""),
                reason=body.get("reason"),
            )
            return (
                jsonify(
                    {
                        "success": True,
                        "message": f"Leave request submitted for {req.total_days} day(s)",
                        "data": to_jsonable(req),
                    }
                ),
                201,
            )
        except Exception as e:
            return error_response(e)

    @app.route("/api/leave/request", methods=["GET"], endpoint="leave_request_list")
    @login_required
    def leave_request_list():
        try:
            page = container.leave_service.list_requests(
                actor=current_actor(),
                employee_id=_optional_int(request.args.get("employee_id"), "employee_id"),
                status=_optional_status(request.args.get("status")),
                page=_optional_int(request.args.get("page"), "page") or 1,
                limit=_optional_int(request.args.get("limit"), "limit") or DEFAULT_PAGE_SIZE,
            )
            return jsonify(
                {
                    "success": True,
                    "data": to_jsonable(list(page.items)),
                    "pagination": {
                        "page": page.page,
                        "limit": page.limit,
                        "total": page.total,
                        "has_more": page.has_more,
                    },
                }
            )
        except Exception as e:
            return error_response(e)

    @app.route("/api/leave/request/<int:request_id>", methods=["GET"], endpoint="leave_request_get")
    @login_required
    def leave_request_get(request_id: int):
        try:
            req = container.leave_service.get(actor=current_actor(), request_id=request_id)
            return jsonify({"success": True, "data": to_jsonable(req)})
        except Exception as e:
            return error_response(e)

    @app.route("/api/leave/request/<int:request_id>/approve", methods=["PUT"], endpoint="leave_request_approve")
    @login_required
    def leave_request_approve(request_id: int):
        try:
            req = container.leave_service.approve(actor=current_actor(), request_id=request_id)
            return jsonify({"success": True, "message": "Leave request approved", "data": to_jsonable(req)})
        except Exception as e:
            return error_response(e)

    @app.route("/api/leave/request/<int:request_id>/reject", methods=["PUT"], endpoint="leave_request_reject")
    @login_required
    def leave_request_reject(request_id: int):
        try:
            body = json_body()
            req = container.leave_service.reject(
                actor=current_actor(),
                request_id=request_id,
                reason=body.get("reason"),
            )
            return jsonify({"success": True, "message": "Leave request rejected", "data": to_jsonable(req)})
        except Exception as e:
            return error_response(e)

    @app.route("/api/leave/request/<int:request_id>/cancel", methods=["PUT"], endpoint="leave_request_cancel")
    @login_required
    def leave_request_cancel(request_id: int):
        try:
            req = container.leave_service.cancel(actor=current_actor(), request_id=request_id)
            return jsonify({"success": True, "message": "Leave request cancelled", "data": to_jsonable(req)})
        except Exception as e:
            return error_response(e)

    @app.route("/api/leave/balance", methods=["GET"], endpoint="leave_balance")
    @login_required
    def leave_balance():
        try:
            actor = current_actor()
            year = _optional_int(request.args.get("year"), "year")
            if year is None:
                year = to_local(now_utc(), container.evaluator.timezone).year
            balances = container.leave_service.get_balances(
                actor=actor,
                employee_id=_optional_int(request.args.get("employee_id"), "employee_id") or actor.employee_id,
                year=year,
            )
            return jsonify({"success": True, "data": [_balance_json(b) for b in balances]})
        except Exception as e:
            return error_response(e)

    @app.route("/api/leave/types", methods=["GET"], endpoint="leave_types")
    @login_required
    def leave_types():
        try:
            return jsonify({"success": True, "data": to_jsonable(list(container.leave_service.list_leave_types()))})
        except Exception as e:
            return error_response(e)
