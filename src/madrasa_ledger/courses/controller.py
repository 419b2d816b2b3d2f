from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_user, json_body, login_required, roles_required, to_json
from ..container import Container
from ..core.enums import Role
from ..users.access import AccessScope


def register(app: Flask, container: Container) -> None:
    courses = container.course_service

    @app.route("/api/courses", methods=["GET"], endpoint="courses_list")
    @login_required
    def courses_list():
        scope = AccessScope.for_user(current_user(), container.store.snapshot)
        rows = [c for c in courses.list_courses() if scope.can_see_course(c.course_id)]
        return jsonify({"ok": True, "courses": to_json(rows)})

    @app.route("/api/courses", methods=["POST"], endpoint="courses_save")
    @roles_required(Role.ADMIN)
    def courses_save():
        course = courses.upsert(json_body())
        return jsonify({"ok": True, "course": to_json(course)})

    @app.route("/api/courses/<course_id>", methods=["DELETE"], endpoint="courses_delete")
    @roles_required(Role.ADMIN)
    def courses_delete(course_id: str):
        courses.delete(course_id)
        return jsonify({"ok": True})
