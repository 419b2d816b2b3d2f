from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import json_body, login_required, roles_required, to_json
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    settings = container.settings_service

    @app.route("/api/settings", methods=["GET"], endpoint="settings_get")
    @login_required
    def settings_get():
        return jsonify({"ok": True, "settings": to_json(settings.get())})

    @app.route("/api/settings", methods=["PUT"], endpoint="settings_replace")
    @roles_required(Role.ADMIN)
    def settings_replace():
        saved = settings.replace(json_body())
        return jsonify({"ok": True, "settings": to_json(saved)})
