from __future__ import annotations

import logging
from typing import Optional

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from ..teachers.repository import TeacherRepository
from .model import SessionUser

logger = logging.getLogger(__name__)

_BAD_LOGIN = "Invalid login id or password"


def _password_matches(password_hash: Optional[str], password: str) -> bool:
    if not password_hash:
        return False
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
        return False


class AuthService:
    """Use case: authenticate the director or a teacher (login)."""

    def __init__(
        self,
        teachers: TeacherRepository,
        *,
        admin_login_id: Optional[str] = None,
        admin_password_hash: Optional[str] = None,
        admin_name: str = "Director",
    ):
        self._teachers = teachers
        self._admin_login_id = admin_login_id
        self._admin_password_hash = admin_password_hash
        self._admin_name = admin_name

    def authenticate(self, login_id: str, password: str) -> SessionUser:
        login_id = require_non_empty(login_id, "Login id")
        password = password or ""

        if self._admin_login_id and login_id == self._admin_login_id:
            if not _password_matches(self._admin_password_hash, password):
                logger.warning("Failed director login for %s", login_id)
                raise AuthenticationError(_BAD_LOGIN)
            return SessionUser(user_id=login_id, full_name=self._admin_name, role=Role.ADMIN)

        teacher = self._teachers.get_by_login_id(login_id)
        if not teacher or not teacher.is_active or not _password_matches(teacher.password_hash, password):
            logger.warning("Failed teacher login for %s", login_id)
            raise AuthenticationError(_BAD_LOGIN)

        if teacher.substitute_for_id:
            return SessionUser(
                user_id=teacher.teacher_id,
                full_name=teacher.full_name,
                role=Role.SUBSTITUTE,
                teacher_id=teacher.teacher_id,
                covers_teacher_id=teacher.substitute_for_id,
            )
        return SessionUser(
            user_id=teacher.teacher_id,
            full_name=teacher.full_name,
            role=Role.TEACHER,
            teacher_id=teacher.teacher_id,
        )
