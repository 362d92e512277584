from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from app.errors import ApiError
from app.settings import get_settings

bearer_scheme = HTTPBearer(auto_error=False)

ROLE_ADMIN = "admin"
ROLE_EMPLOYEE = "employee"
KNOWN_ROLES = frozenset({ROLE_ADMIN, ROLE_EMPLOYEE})


@dataclass(frozen=True, slots=True)
class CallerContext:
    employee_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(
    *,
    employee_id: str,
    role: str = ROLE_EMPLOYEE,
    email: str | None = None,
) -> tuple[str, int, dict[str, Any]]:
    settings = get_settings()
    now = _utcnow()
    exp = now + timedelta(minutes=settings.access_token_minutes)
    claims: dict[str, Any] = {
        "sub": employee_id,
        "employee_id": employee_id,
        "email": email,
        "role": role,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "jti": str(uuid4()),
        "typ": "access",
    }
    token = jwt.encode(claims, settings.jwt_secret, algorithm="HS256")
    return token, settings.access_token_minutes * 60, claims


def decode_token(token: str) -> dict[str, Any]:
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=["HS256"],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={"require_sub": True, "require_iat": True, "require_exp": True},
        )
    except JWTError as exc:
        raise ApiError(status_code=401, code="INVALID_TOKEN", message="Token is invalid.") from exc

    if payload.get("typ") != "access":
        raise ApiError(status_code=401, code="INVALID_TOKEN", message="Token type is invalid.")

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise ApiError(status_code=401, code="INVALID_TOKEN", message="Token subject is invalid.")

    if payload.get("role") not in KNOWN_ROLES:
        raise ApiError(status_code=403, code="FORBIDDEN", message="Unknown role.")

    return payload


def require_caller(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> CallerContext:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise ApiError(status_code=401, code="INVALID_TOKEN", message="Missing bearer token.")

    payload = decode_token(credentials.credentials)
    caller = CallerContext(
        employee_id=str(payload.get("employee_id") or payload["sub"]),
        role=str(payload["role"]),
    )

    request.state.actor = caller.role
    request.state.actor_id = caller.employee_id
    return caller


def require_admin(caller: CallerContext = Depends(require_caller)) -> CallerContext:
    if not caller.is_admin:
        raise ApiError(status_code=403, code="FORBIDDEN", message="Admin access required.")
    return caller


def ensure_self_or_admin(caller: CallerContext, employee_id: str) -> None:
    if caller.is_admin or caller.employee_id == employee_id:
        return
    raise ApiError(
        status_code=403,
        code="FORBIDDEN",
        message="You can only access your own attendance records.",
    )
