from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login.

    ``teacher_id`` is None for the director account. A substitute keeps
    their own id and names the covered teacher in ``covers_teacher_id``.
    """

    user_id: str
    full_name: str
    role: Role
    teacher_id: Optional[str] = None
    covers_teacher_id: Optional[str] = None

    def to_session(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.full_name,
            "role": self.role.value,
            "teacher_id": self.teacher_id,
            "covers_teacher_id": self.covers_teacher_id,
        }

    @classmethod
    def from_session(cls, data) -> Optional["SessionUser"]:
        if not data or "user_id" not in data:
            return None
        return cls(
            user_id=data["user_id"],
            full_name=data.get("name") or "",
            role=Role(data["role"]),
            teacher_id=data.get("teacher_id"),
            covers_teacher_id=data.get("covers_teacher_id"),
        )
