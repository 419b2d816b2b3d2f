from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import login_required, to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    store = container.store

    def _status() -> dict:
        snap = store.snapshot
        return {
            "ok": True,
            "loaded_at": to_json(snap.loaded_at),
            "stale": store.is_stale,
            "counts": {
                "students": len(snap.students),
                "teachers": len(snap.teachers),
                "courses": len(snap.courses),
                "attendance": len(snap.attendance),
                "transactions": len(snap.transactions),
            },
        }

    @app.before_request
    def _ensure_loaded():
        if not store.has_loaded:
            store.load()

    @app.route("/api/store/status", methods=["GET"], endpoint="store_status")
    @login_required
    def store_status():
        return jsonify(_status())

    @app.route("/api/store/reload", methods=["POST"], endpoint="store_reload")
    @login_required
    def store_reload():
        store.load()
        return jsonify(_status())
