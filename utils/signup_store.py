"""
Email signup persistence
Inserts one record and classifies the storage outcome so callers never inspect driver error codes
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from models.email_signup import EmailSignup

# SQLSTATE for unique_violation (psycopg2 exposes pgcode, psycopg 3 sqlstate)
PG_UNIQUE_VIOLATION = "23505"
SQLITE_UNIQUE_VIOLATION = "SQLITE_CONSTRAINT_UNIQUE"


@dataclass(frozen=True)
class Inserted:
    record: EmailSignup


@dataclass(frozen=True)
class Conflict:
    email: str


@dataclass(frozen=True)
class Failed:
    cause: BaseException


PersistenceOutcome = Union[Inserted, Conflict, Failed]


def is_unique_violation(ex: IntegrityError) -> bool:
    """True when the driver reports a uniqueness violation (not NOT NULL, CHECK, FK...)."""
    orig = getattr(ex, "orig", None)
    if orig is None:
        return False
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return code == PG_UNIQUE_VIOLATION
    errorname = getattr(orig, "sqlite_errorname", None)
    if errorname:
        return errorname == SQLITE_UNIQUE_VIOLATION
    return "UNIQUE constraint failed" in str(orig)


def insert_signup(
    db: Session,
    *,
    email: str,
    source: str,
    user_agent: Optional[str],
    metadata: Optional[Dict[str, Any]] = None,
) -> PersistenceOutcome:
    rec = EmailSignup(
        email=email,
        source=source,
        user_agent=user_agent,
        signup_metadata=metadata or {},
    )
    try:
        db.add(rec)
        db.flush()
        # Load server-assigned columns (created_at) before the commit
        db.refresh(rec)
        db.commit()
    except IntegrityError as ex:
        db.rollback()
        if is_unique_violation(ex):
            return Conflict(email=email)
        return Failed(cause=ex)
    except SQLAlchemyError as ex:
        db.rollback()
        return Failed(cause=ex)

    return Inserted(record=rec)
