from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_user, json_body, login_required, roles_required, to_json
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    teachers = container.teacher_service

    @app.route("/api/teachers", methods=["GET"], endpoint="teachers_list")
    @login_required
    def teachers_list():
        user = current_user()
        rows = teachers.list_teachers()
        if user.role != Role.ADMIN:
            visible = {user.teacher_id, user.covers_teacher_id}
            rows = [t for t in rows if t.teacher_id in visible]
        return jsonify({"ok": True, "teachers": to_json(rows)})

    @app.route("/api/teachers", methods=["POST"], endpoint="teachers_save")
    @roles_required(Role.ADMIN)
    def teachers_save():
        data = json_body()
        teacher = teachers.upsert(data, password=data.get("password") or None)
        return jsonify({"ok": True, "teacher": to_json(teacher)})

    @app.route("/api/teachers/<teacher_id>", methods=["DELETE"], endpoint="teachers_delete")
    @roles_required(Role.ADMIN)
    def teachers_delete(teacher_id: str):
        teachers.delete(teacher_id)
        return jsonify({"ok": True})
