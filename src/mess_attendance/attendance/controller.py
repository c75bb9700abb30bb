from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_date
from ..common.http import admin_required, domain_error_response, fail, login_required
from ..common.validators import parse_meal, parse_meal_flags
from ..container import Container
from ..core.exceptions import DomainError, ValidationError
from ..core.enums import Meal
from ..tracking.model import AttendanceWindow
from .model import AttendanceRecord
from .qr import validate_qr_code


def record_to_dict(r: AttendanceRecord) -> dict:
    return {
        "id": r.record_id,
        "student_id": r.student_id,
        "date": r.attendance_date.strftime("%Y-%m-%d"),
        "breakfast": r.breakfast,
        "lunch": r.lunch,
        "dinner": r.dinner,
        "updated_at": r.updated_at.isoformat(),
        "scanned_at": r.scanned_at.isoformat() if r.scanned_at else None,
    }


def window_to_dict(w: AttendanceWindow) -> dict:
    return {
        "start": w.start.isoformat(),
        "end": w.end.isoformat(),
        "meals": [
            {
                "meal": m.meal.value,
                "count": m.count,
                "students": [{"name": s.name, "roll_number": s.roll_number} for s in m.students],
            }
            for m in w.meals
        ],
    }


def register(app: Flask, container: Container) -> None:
    run = container.runner.run
    service = container.attendance_service

    def _parse_date(value: str):
        try:
            return parse_iso_date(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid date: {value!r}") from None

    @app.route("/api/attendance/scan", methods=["POST"], endpoint="api_attendance_scan")
    @login_required
    def api_attendance_scan():
        """QR deep link: mark the meal being served for the signed-in student."""
        data = request.get_json(silent=True) or {}
        if not validate_qr_code(data.get("qr_code")):
            return fail("Invalid QR code. Please scan the mess attendance QR code.", 400)

        try:
            result = run(service.mark_current_meal(str(session["user_id"])))
        except DomainError as e:
            return domain_error_response(e)

        return jsonify(
            {
                "success": True,
                "message": result.message,
                "meal": result.meal.value,
                "already_marked": result.already_marked,
                "record": record_to_dict(result.record),
            }
        ), 200

    @app.route(
        "/api/admin/attendance/<int:student_id>/<day>/<meal>",
        methods=["POST"],
        endpoint="api_admin_attendance_toggle",
    )
    @admin_required
    def api_admin_attendance_toggle(student_id: int, day: str, meal: str):
        data = request.get_json(silent=True) or {}
        try:
            present = data.get("present", True)
            if not isinstance(present, bool):
                raise ValidationError("present must be true or false")
            record = run(service.toggle_meal(student_id, _parse_date(day), parse_meal(meal), present))
        except DomainError as e:
            return domain_error_response(e)
        return jsonify({"success": True, "record": record_to_dict(record)}), 200

    @app.route("/api/admin/attendance/<int:student_id>/<day>", methods=["PUT"], endpoint="api_admin_attendance_edit")
    @admin_required
    def api_admin_attendance_edit(student_id: int, day: str):
        data = request.get_json(silent=True) or {}
        try:
            record = run(service.edit_meals(student_id, _parse_date(day), parse_meal_flags(data)))
        except DomainError as e:
            return domain_error_response(e)
        return jsonify({"success": True, "record": record_to_dict(record)}), 200

    @app.route("/api/admin/attendance/bulk", methods=["POST"], endpoint="api_admin_attendance_bulk")
    @admin_required
    def api_admin_attendance_bulk():
        data = request.get_json(silent=True) or {}
        try:
            student_ids = data.get("student_ids") or []
            if not isinstance(student_ids, list) or not all(isinstance(i, int) for i in student_ids):
                raise ValidationError("student_ids must be a list of ids")
            result = run(
                service.bulk_mark(
                    student_ids,
                    _parse_date(data.get("date") or ""),
                    parse_meal(data.get("meal")),
                )
            )
        except DomainError as e:
            return domain_error_response(e)

        return jsonify(
            {
                "success": result.all_succeeded,
                "message": result.summary,
                "succeeded": result.succeeded,
                "failed": [{"student_id": f.student_id, "message": f.message} for f in result.failed],
            }
        ), 200

    @app.route(
        "/api/admin/attendance/records/<int:record_id>",
        methods=["PATCH", "DELETE"],
        endpoint="api_admin_attendance_record",
    )
    @admin_required
    def api_admin_attendance_record(record_id: int):
        # Clients send 0 for a student with no row yet.
        ref = record_id or None
        try:
            if request.method == "DELETE":
                run(service.delete(ref))
                return jsonify({"success": True, "message": "Attendance deleted"}), 200

            data = request.get_json(silent=True) or {}
            record = run(service.update_record(ref, parse_meal_flags(data)))
        except DomainError as e:
            return domain_error_response(e)
        return jsonify({"success": True, "record": record_to_dict(record)}), 200

    @app.route("/api/admin/attendance/stats", methods=["GET"], endpoint="api_admin_attendance_stats")
    @admin_required
    def api_admin_attendance_stats():
        try:
            day = _parse_date(request.args["date"]) if request.args.get("date") else None
            stats = run(container.daily_stats.today_stats(day))
            meals = run(container.daily_stats.meal_stats(day))
        except DomainError as e:
            return domain_error_response(e)

        return jsonify(
            {
                "success": True,
                "total": stats.total,
                "present": stats.present,
                "percentage": stats.percentage,
                "meals": {m.value: {"present": meals[m].present, "eligible": meals[m].eligible} for m in Meal},
            }
        ), 200

    @app.route("/api/admin/attendance/recent", methods=["GET"], endpoint="api_admin_attendance_recent")
    @admin_required
    def api_admin_attendance_recent():
        """Preview of what the next digest would cover."""
        try:
            minutes = int(request.args.get("minutes", "10"))
            if minutes <= 0:
                raise ValueError
        except ValueError:
            return fail("minutes must be a positive integer", 400)

        end = container.clock.now()
        try:
            window = run(container.window_aggregator.aggregate(end - timedelta(minutes=minutes), end))
        except DomainError as e:
            return domain_error_response(e)
        return jsonify({"success": True, "window": window_to_dict(window)}), 200
