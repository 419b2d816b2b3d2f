from __future__ import annotations

from flask import Flask, jsonify, request

from ..attendance.controller import filter_from_args
from ..common.datetime_utils import now_local, period_of
from ..common.web import csv_response, current_user, login_required, roles_required, to_json
from ..container import Container
from ..core.enums import Role
from ..ledger.controller import window_from_args
from ..users.access import AccessScope

_SETTLEMENT_FIELDS = [
    "period",
    "obligation",
    "paid",
    "balance",
    "balance_label",
    "status",
    "payment_modes",
    "receipts",
    "last_payment_date",
]
FEE_FIELDS = ["id", "name", "course", "parent_phone", *_SETTLEMENT_FIELDS]
PAYROLL_FIELDS = ["id", "name", "salary_type", *_SETTLEMENT_FIELDS]
ATTENDANCE_FIELDS = ["date", "kind", "id", "name", "course", "status", "remarks", "marked_by"]


def _slug(window) -> str:
    return window.label.replace(" ", "_")


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    def _payroll_data():
        user = current_user()
        window = window_from_args(request.args)
        teacher_id = None if user.role == Role.ADMIN else user.teacher_id
        return window, reports.payroll_report(window, teacher_id=teacher_id)

    def _attendance_data():
        scope = AccessScope.for_user(current_user(), container.store.snapshot)
        history = container.attendance_service.history(filter_from_args(request.args))
        return reports.attendance_register(records=scope.filter_attendance(history))

    @app.route("/api/reports/fees", methods=["GET"], endpoint="report_fees")
    @roles_required(Role.ADMIN)
    def report_fees():
        data = reports.fee_report(window_from_args(request.args))
        return jsonify({"ok": True, "rows": data.rows, "summary": data.summary})

    @app.route("/api/reports/fees.csv", methods=["GET"], endpoint="report_fees_csv")
    @roles_required(Role.ADMIN)
    def report_fees_csv():
        window = window_from_args(request.args)
        data = reports.fee_report(window)
        return csv_response(data.rows, fieldnames=FEE_FIELDS, filename=f"fees_{_slug(window)}.csv")

    @app.route("/api/reports/payroll", methods=["GET"], endpoint="report_payroll")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def report_payroll():
        _, data = _payroll_data()
        return jsonify({"ok": True, "rows": data.rows, "summary": data.summary})

    @app.route("/api/reports/payroll.csv", methods=["GET"], endpoint="report_payroll_csv")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def report_payroll_csv():
        window, data = _payroll_data()
        return csv_response(data.rows, fieldnames=PAYROLL_FIELDS, filename=f"payroll_{_slug(window)}.csv")

    @app.route("/api/reports/attendance", methods=["GET"], endpoint="report_attendance")
    @login_required
    def report_attendance():
        data = _attendance_data()
        return jsonify({"ok": True, "rows": data.rows, "summary": data.summary})

    @app.route("/api/reports/attendance.csv", methods=["GET"], endpoint="report_attendance_csv")
    @login_required
    def report_attendance_csv():
        data = _attendance_data()
        return csv_response(data.rows, fieldnames=ATTENDANCE_FIELDS, filename="attendance_register.csv")

    @app.route("/api/dashboard", methods=["GET"], endpoint="dashboard")
    @roles_required(Role.ADMIN)
    def dashboard():
        period = request.args.get("month") or period_of(now_local().date())
        return jsonify({"ok": True, "dashboard": to_json(reports.dashboard(period))})
