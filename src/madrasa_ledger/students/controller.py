from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import current_user, json_body, login_required, roles_required, to_json
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..users.access import AccessScope


def register(app: Flask, container: Container) -> None:
    store = container.store
    students = container.student_service

    def _with_teachers(student) -> dict:
        out = to_json(student)
        out["assigned_teacher_ids"] = sorted(store.resolve_assigned_teachers(student))
        return out

    @app.route("/api/students", methods=["GET"], endpoint="students_list")
    @login_required
    def students_list():
        scope = AccessScope.for_user(current_user(), store.snapshot)
        course_id = request.args.get("course_id") or None
        rows = [
            s
            for s in students.list_students()
            if scope.can_see_student(s.student_id) and (course_id is None or s.course_id == course_id)
        ]
        return jsonify({"ok": True, "students": [_with_teachers(s) for s in rows]})

    @app.route("/api/students/<student_id>", methods=["GET"], endpoint="students_get")
    @login_required
    def students_get(student_id: str):
        scope = AccessScope.for_user(current_user(), store.snapshot)
        if not scope.can_see_student(student_id):
            raise AuthorizationError("You do not have access to this student")
        return jsonify({"ok": True, "student": _with_teachers(students.get(student_id))})

    @app.route("/api/students", methods=["POST"], endpoint="students_save")
    @roles_required(Role.ADMIN)
    def students_save():
        student = students.upsert(json_body())
        return jsonify({"ok": True, "student": _with_teachers(student)})

    @app.route("/api/students/bulk", methods=["POST"], endpoint="students_bulk")
    @roles_required(Role.ADMIN)
    def students_bulk():
        rows = json_body().get("students")
        if not isinstance(rows, list):
            raise ValidationError("students must be a list")
        result = students.bulk_import(rows)
        return jsonify({"ok": not result.errors, "processed": result.processed, "errors": result.errors})

    @app.route("/api/students/<student_id>", methods=["DELETE"], endpoint="students_delete")
    @roles_required(Role.ADMIN)
    def students_delete(student_id: str):
        students.delete(student_id)
        return jsonify({"ok": True})
