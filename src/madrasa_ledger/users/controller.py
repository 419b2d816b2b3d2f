from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, session

from ..common.web import current_user, json_body, login_required, to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    app.permanent_session_lifetime = timedelta(days=7)

    @app.route("/api/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        s_user = container.auth_service.authenticate(data.get("login_id", ""), data.get("password", ""))

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        session.update(s_user.to_session())

        app.logger.info("Login: %s (%s)", s_user.user_id, s_user.role.value)
        return jsonify({"ok": True, "user": to_json(s_user)})

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"ok": True})

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return jsonify({"ok": True, "user": to_json(current_user())})
