from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_user, json_body, login_required, roles_required, to_json
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    guard = container.period_guard

    @app.route("/api/periods", methods=["GET"], endpoint="periods_list")
    @login_required
    def periods_list():
        return jsonify({"ok": True, "periods": to_json(guard.list_statuses())})

    @app.route("/api/periods/<period_month>", methods=["GET"], endpoint="periods_get")
    @login_required
    def periods_get(period_month: str):
        return jsonify({"ok": True, "period": to_json(guard.status(period_month))})

    @app.route("/api/periods/<period_month>", methods=["PUT"], endpoint="periods_set")
    @roles_required(Role.ADMIN)
    def periods_set(period_month: str):
        closed = json_body().get("closed")
        if not isinstance(closed, bool):
            raise ValidationError("closed must be true or false")
        lock = guard.set_locked(period_month, closed, actor=current_user().user_id)
        return jsonify({"ok": True, "period": to_json(lock)})
