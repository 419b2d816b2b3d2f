from __future__ import annotations

from typing import Optional, Protocol

from .model import Teacher


class TeacherRepository(Protocol):
    def get_by_login_id(self, login_id: str) -> Optional[Teacher]:
        raise NotImplementedError

    def upsert(self, teacher: Teacher) -> None:
        raise NotImplementedError

    def delete(self, teacher_id: str) -> bool:
        raise NotImplementedError
