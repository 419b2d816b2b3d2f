from __future__ import annotations

import csv
import io
import logging
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from functools import wraps
from typing import Any, Iterable, Optional

from flask import Flask, current_app, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    PeriodLocked,
    SourceUnavailable,
    StoreTimeout,
    ValidationError,
)
from ..users.model import SessionUser

logger = logging.getLogger(__name__)

# Never serialized, whatever the entity.
_PRIVATE_FIELDS = {"password_hash"}


def to_json(value: Any) -> Any:
    """Plain JSON types for entities: Decimal as "0.00", dates ISO, enums by value."""
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_json(getattr(value, f.name)) for f in fields(value) if f.init and f.name not in _PRIVATE_FIELDS}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return f"{value:.2f}"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json(v) for v in value]
    return value


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def current_user() -> Optional[SessionUser]:
    return SessionUser.from_session(session)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_user() is None:
            raise AuthenticationError("Please log in to continue")
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = current_user()
            if user is None:
                raise AuthenticationError("Please log in to continue")
            if user.role.value not in allowed:
                raise AuthorizationError("You do not have access to this action")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def csv_response(rows: Iterable[dict], *, fieldnames: list[str], filename: str):
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=fieldnames, extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow(row)

    csv_bytes = out.getvalue().encode("utf-8-sig")
    return current_app.response_class(
        csv_bytes,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


def _error(status: int, message: str, **extra):
    payload = {"ok": False, "error": message}
    payload.update(extra)
    return jsonify(payload), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return _error(400, str(e), errors=e.errors)

    @app.errorhandler(AuthenticationError)
    def _authentication(e: AuthenticationError):
        return _error(401, str(e))

    @app.errorhandler(AuthorizationError)
    def _authorization(e: AuthorizationError):
        return _error(403, str(e))

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return _error(404, str(e))

    @app.errorhandler(PeriodLocked)
    def _locked(e: PeriodLocked):
        return _error(409, str(e), code="period_locked", period=e.period_month)

    @app.errorhandler(SourceUnavailable)
    def _unavailable(e: SourceUnavailable):
        logger.error("Backing store unavailable: %s", e)
        code = "timeout" if isinstance(e, StoreTimeout) else "source_unavailable"
        return _error(503, str(e), code=code, stale=True)

    @app.errorhandler(DomainError)
    def _domain(e: DomainError):
        return _error(400, str(e))
