"""Tests for signup persistence and outcome classification."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import sessionmaker

from core.database import Base
from models.email_signup import EmailSignup
from utils.signup_store import Conflict, Failed, Inserted, insert_signup, is_unique_violation


class _DriverError(Exception):
    def __init__(self, message, pgcode=None, sqlstate=None):
        super().__init__(message)
        self.pgcode = pgcode
        self.sqlstate = sqlstate


def _integrity_error(orig) -> IntegrityError:
    return IntegrityError("INSERT INTO email_signups ...", {}, orig)


class TestInsertSignup:
    def test_inserted_record_has_server_assigned_fields(self, db):
        outcome = insert_signup(db, email="new@example.com", source="hero", user_agent="ua/1.0")

        assert isinstance(outcome, Inserted)
        rec = outcome.record
        assert rec.id is not None
        assert rec.created_at is not None
        assert rec.email == "new@example.com"
        assert rec.user_agent == "ua/1.0"
        assert rec.signup_metadata == {}

    def test_record_readable_after_session_closes(self, db):
        outcome = insert_signup(db, email="detached@example.com", source="cta", user_agent=None)
        db.close()

        data = outcome.record.to_dict()
        assert data["email"] == "detached@example.com"
        assert data["created_at"]

    def test_failure_loading_defaults_leaves_nothing_stored(self, db, monkeypatch):
        def broken_refresh(instance, *args, **kwargs):
            raise OperationalError("SELECT email_signups ...", {}, Exception("server closed the connection"))

        monkeypatch.setattr(db, "refresh", broken_refresh)

        outcome = insert_signup(db, email="flaky@example.com", source="hero", user_agent=None)

        assert isinstance(outcome, Failed)
        assert isinstance(outcome.cause, OperationalError)
        monkeypatch.undo()
        assert db.query(EmailSignup).count() == 0

    def test_duplicate_email_is_a_conflict(self, db):
        insert_signup(db, email="dup@example.com", source="hero", user_agent=None)
        outcome = insert_signup(db, email="dup@example.com", source="timeline", user_agent=None)

        assert outcome == Conflict(email="dup@example.com")
        assert db.query(EmailSignup).count() == 1

    def test_session_usable_after_conflict(self, db):
        insert_signup(db, email="dup@example.com", source="hero", user_agent=None)
        insert_signup(db, email="dup@example.com", source="hero", user_agent=None)

        outcome = insert_signup(db, email="other@example.com", source="hero", user_agent=None)

        assert isinstance(outcome, Inserted)

    def test_other_constraint_violation_is_a_failure(self, db):
        outcome = insert_signup(db, email="x@example.com", source="footer", user_agent=None)

        assert isinstance(outcome, Failed)
        assert isinstance(outcome.cause, IntegrityError)
        assert db.query(EmailSignup).count() == 0


class TestIsUniqueViolation:
    def test_postgres_unique_violation(self):
        assert is_unique_violation(_integrity_error(_DriverError("duplicate key", pgcode="23505")))

    def test_postgres_not_null_violation(self):
        assert not is_unique_violation(_integrity_error(_DriverError("null value", pgcode="23502")))

    def test_psycopg3_sqlstate(self):
        assert is_unique_violation(_integrity_error(_DriverError("duplicate key", sqlstate="23505")))

    def test_sqlite_message_fallback(self):
        assert is_unique_violation(_integrity_error(Exception("UNIQUE constraint failed: email_signups.email")))
        assert not is_unique_violation(_integrity_error(Exception("NOT NULL constraint failed: email_signups.source")))


class TestConcurrentSubmissions:
    @pytest.fixture
    def file_sessions(self, tmp_path):
        eng = create_engine(
            f"sqlite:///{tmp_path / 'signups.db'}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        Base.metadata.create_all(bind=eng)
        yield sessionmaker(autocommit=False, autoflush=False, bind=eng)
        eng.dispose()

    def test_same_email_yields_one_insert_and_one_conflict(self, file_sessions):
        barrier = threading.Barrier(2)

        def submit(source):
            session = file_sessions()
            try:
                barrier.wait()
                outcome = insert_signup(session, email="race@example.com", source=source, user_agent=None)
                return type(outcome)
            finally:
                session.close()

        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(submit, ["hero", "cta"]))

        assert sorted(r.__name__ for r in results) == ["Conflict", "Inserted"]
        check = file_sessions()
        try:
            assert check.query(EmailSignup).filter(EmailSignup.email == "race@example.com").count() == 1
        finally:
            check.close()
