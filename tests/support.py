from __future__ import annotations

from collections.abc import Generator
from datetime import datetime

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.db import Base
from app.models import AttendanceEvent, AttendanceStatus
from app.security import create_access_token
from app.services.attendance import create_event


def make_session_factory() -> sessionmaker[Session]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def override_get_db(session_factory: sessionmaker[Session]):  # type: ignore[no-untyped-def]
    def _override() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    return _override


def seed_event(
    db: Session,
    employee_id: str,
    status: AttendanceStatus,
    ts_utc: datetime,
) -> AttendanceEvent:
    return create_event(db, employee_id=employee_id, status=status, ts_utc=ts_utc)


def auth_headers(employee_id: str, role: str = "employee") -> dict[str, str]:
    token, _, _ = create_access_token(employee_id=employee_id, role=role)
    return {"Authorization": f"Bearer {token}"}
