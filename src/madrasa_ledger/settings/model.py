from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any


@dataclass(frozen=True)
class SystemSettings:
    """Institution-wide settings. Always replaced as a whole."""

    institution_name: str = "Bismilla Shah Madrasa"
    contact_phone: str = "+91 98765 43210"
    contact_email: str = "admin@bismillashah.com"
    address: str = "123, Ilm Street, Knowledge City"
    authorized_signature: str = "Mudir Name"
    currency: str = "INR"
    academic_year: str = "2025-2026"
    timezone: str = "Asia/Kolkata"

    @staticmethod
    def field_names() -> list[str]:
        return [f.name for f in fields(SystemSettings)]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
