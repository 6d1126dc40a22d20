from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import wraps
from typing import Optional

from flask import Flask, g, jsonify, request, session

from ..common.datetime_utils import month_range, parse_iso_date
from ..common.validators import clean_optional_text
from ..container import Container
from ..core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, OWN_RECORDS_PAGE_SIZE
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    AttendanceConflictError,
    AuthenticationError,
    AuthorizationError,
    StorageError,
    ValidationError,
)
from ..users.session import identity_from_session
from .model import RecordFilter

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    attendance_service = container.attendance_service
    stats_service = container.stats_service

    def _fail(message: str, status: int, **data):
        body = {"success": False, "message": message}
        if data:
            body["data"] = data
        return jsonify(body), status

    def _identity(*, admin: bool = False):
        identity = identity_from_session(session)
        if identity is None:
            raise AuthenticationError("Authentication required.")
        if admin and not identity.is_admin:
            raise AuthorizationError("Admin access required.")
        return identity

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.identity = _identity()
            return view(*args, **kwargs)

        return wrapper

    def admin_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.identity = _identity(admin=True)
            return view(*args, **kwargs)

        return wrapper

    @app.errorhandler(AuthenticationError)
    def handle_unauthenticated(e):
        return _fail(str(e), 401)

    @app.errorhandler(AuthorizationError)
    def handle_forbidden(e):
        return _fail(str(e), 403)

    def _conflict(e: AttendanceConflictError):
        if e.record is None:
            return _fail(str(e), 400)
        return _fail(str(e), 400, attendance=attendance_service.format(e.record))

    def _payload() -> dict:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    def _origin_address() -> Optional[str]:
        forwarded = request.headers.get("X-Forwarded-For", "")
        return clean_optional_text(forwarded.split(",")[0]) or request.remote_addr

    def _date_range():
        start_raw = request.args.get("startDate")
        end_raw = request.args.get("endDate")
        if start_raw and end_raw:
            return parse_iso_date(start_raw), parse_iso_date(end_raw)
        return month_range(attendance_service.today())

    def _status_filter() -> Optional[AttendanceStatus]:
        raw = request.args.get("status")
        if not raw:
            return None
        try:
            return AttendanceStatus(raw)
        except ValueError:
            raise ValidationError(f"Unknown status: {raw}") from None

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify(
            {
                "success": True,
                "message": "Server is running",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "store": container.store_backend.value,
                "degraded": container.degraded,
            }
        )

    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="api_checkin")
    @login_required
    def checkin():
        data = _payload()
        try:
            record = attendance_service.check_in(
                g.identity,
                location=data.get("location"),
                origin_address=_origin_address(),
                remarks=data.get("remarks"),
            )
        except ValidationError as e:
            return _fail(str(e), 400)
        except AttendanceConflictError as e:
            return _conflict(e)
        except StorageError:
            logger.exception("check-in failed for %s", g.identity.subject_id)
            return _fail("Server error during check-in.", 500)

        return (
            jsonify(
                {
                    "success": True,
                    "message": "Check-in recorded successfully.",
                    "data": {"attendance": attendance_service.format(record)},
                }
            ),
            201,
        )

    @app.route("/api/attendance/checkout", methods=["PUT"], endpoint="api_checkout")
    @login_required
    def checkout():
        data = _payload()
        try:
            record = attendance_service.check_out(
                g.identity,
                location=data.get("location"),
                origin_address=_origin_address(),
                remarks=data.get("remarks"),
            )
        except ValidationError as e:
            return _fail(str(e), 400)
        except AttendanceConflictError as e:
            return _conflict(e)
        except StorageError:
            logger.exception("check-out failed for %s", g.identity.subject_id)
            return _fail("Server error during check-out.", 500)

        return jsonify(
            {
                "success": True,
                "message": "Check-out recorded successfully.",
                "data": {"attendance": attendance_service.format(record)},
            }
        )

    @app.route("/api/attendance/my-records", methods=["GET"], endpoint="api_my_records")
    @login_required
    def my_records():
        try:
            start, end = _date_range()
            result, summary = attendance_service.list_own_records(
                g.identity.subject_id,
                start=start,
                end=end,
                page=request.args.get("page", DEFAULT_PAGE),
                page_size=request.args.get("limit", OWN_RECORDS_PAGE_SIZE),
            )
        except ValidationError as e:
            return _fail(str(e), 400)
        except StorageError:
            logger.exception("listing own records failed for %s", g.identity.subject_id)
            return _fail("Server error while fetching attendance records.", 500)

        return jsonify(
            {
                "success": True,
                "data": {
                    "attendance": [attendance_service.format(r) for r in result.items],
                    "pagination": result.pagination(),
                    "stats": summary.to_dict(),
                },
            }
        )

    @app.route("/api/attendance/today", methods=["GET"], endpoint="api_today")
    @login_required
    def today():
        try:
            status = attendance_service.get_today_status(g.identity.subject_id)
        except StorageError:
            logger.exception("today status failed for %s", g.identity.subject_id)
            return _fail("Server error while fetching today's attendance.", 500)

        return jsonify(
            {
                "success": True,
                "data": {
                    "has_checked_in": status.checked_in,
                    "has_checked_out": status.checked_out,
                    "attendance": attendance_service.format(status.record) if status.record else None,
                },
            }
        )

    @app.route("/api/attendance/all", methods=["GET"], endpoint="api_all_records")
    @admin_required
    def all_records():
        try:
            start, end = _date_range()
            record_filter = RecordFilter(
                subject_id=clean_optional_text(request.args.get("employeeId")),
                start=start,
                end=end,
                status=_status_filter(),
                search=clean_optional_text(request.args.get("search")),
            )
            result = attendance_service.list_records(
                record_filter,
                page=request.args.get("page", DEFAULT_PAGE),
                page_size=request.args.get("limit", DEFAULT_PAGE_SIZE),
            )
        except ValidationError as e:
            return _fail(str(e), 400)
        except StorageError:
            logger.exception("listing all records failed")
            return _fail("Server error while fetching attendance records.", 500)

        return jsonify(
            {
                "success": True,
                "data": {
                    "attendance": [attendance_service.format(r) for r in result.items],
                    "pagination": result.pagination(),
                },
            }
        )

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="api_stats")
    @admin_required
    def stats():
        try:
            if request.args.get("startDate") and request.args.get("endDate"):
                start, end = _date_range()
                summary = stats_service.compute_aggregate_stats(start, end)
            else:
                summary = stats_service.stats_for_period(request.args.get("period", "month"))
        except ValidationError as e:
            return _fail(str(e), 400)
        except StorageError:
            logger.exception("stats computation failed")
            return _fail("Server error while fetching attendance statistics.", 500)

        return jsonify({"success": True, "data": summary.to_dict()})
