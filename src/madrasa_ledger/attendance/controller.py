from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.validators import optional_text, parse_enum
from ..common.web import current_user, json_body, login_required, to_json
from ..container import Container
from ..core.enums import SubjectKind
from ..core.exceptions import AuthorizationError, ValidationError
from ..users.access import AccessScope
from .model import AttendanceFilter, AttendanceInput


def filter_from_args(args) -> AttendanceFilter:
    kind = optional_text(args.get("kind"))
    date_from = optional_text(args.get("from"))
    date_to = optional_text(args.get("to"))
    return AttendanceFilter(
        subject_kind=parse_enum(SubjectKind, kind, "kind") if kind else None,
        subject_id=optional_text(args.get("subject_id")),
        course_id=optional_text(args.get("course_id")),
        date_from=parse_iso_date(date_from, "from") if date_from else None,
        date_to=parse_iso_date(date_to, "to") if date_to else None,
    )


def register(app: Flask, container: Container) -> None:
    reconciler = container.attendance_service

    def _scope() -> AccessScope:
        return AccessScope.for_user(current_user(), container.store.snapshot)

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_submit")
    @login_required
    def attendance_submit():
        rows = json_body().get("records")
        if not isinstance(rows, list):
            raise ValidationError("records must be a list")

        inputs = [AttendanceInput.from_payload(r if isinstance(r, dict) else {}) for r in rows]
        result = reconciler.submit_batch(
            inputs,
            recorded_by_role=current_user().role,
            authorize=_scope().require_can_mark,
        )
        return jsonify(
            {
                "ok": True,
                "inserted": result.inserted,
                "updated": result.updated,
                "records": to_json(result.records),
            }
        )

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_history")
    @login_required
    def attendance_history():
        rows = _scope().filter_attendance(reconciler.history(filter_from_args(request.args)))
        return jsonify({"ok": True, "records": to_json(rows)})

    @app.route("/api/attendance/present", methods=["GET"], endpoint="attendance_present")
    @login_required
    def attendance_present():
        record = reconciler.present(
            request.args.get("kind") or SubjectKind.STUDENT,
            request.args.get("subject_id", ""),
            request.args.get("date", ""),
        )
        if not _scope().can_see_attendance(record):
            raise AuthorizationError("You do not have access to this attendance record")
        return jsonify({"ok": True, "record": to_json(record)})

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @login_required
    def attendance_summary():
        flt = filter_from_args(request.args)
        scope = _scope()
        if scope.is_admin:
            summary = reconciler.summary(flt)
        else:
            visible = scope.filter_attendance(reconciler.history(flt))
            summary = reconciler.summary(flt, records=visible)
        return jsonify(
            {
                "ok": True,
                "present": summary.present,
                "absent": summary.absent,
                "late": summary.late,
                "total": summary.total,
                "attendance_rate": summary.attendance_rate,
            }
        )
