"""
Unit tests for the transaction runners (SQLAlchemy and in-memory).
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from travel_api.models import RefreshToken, User
from travel_api.services._shared.errors import InfrastructureError
from travel_api.services._shared.ports import RefreshTokenRecord, UserRecord
from travel_api.uow import InMemoryTransactionRunner, SQLAlchemyTransactionRunner

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


def _user(user_id: str = "u-1", email: str = "a@example.com") -> UserRecord:
    return UserRecord(
        id=user_id,
        username=email.split("@")[0],
        email=email,
        password_hash="hash",
        created_at=NOW,
        updated_at=NOW,
    )


def _token(token_id: str, user_id: str = "u-1") -> RefreshTokenRecord:
    return RefreshTokenRecord(
        id=token_id, user_id=user_id, expires_at=NOW + timedelta(days=7), created_at=NOW
    )


class TestSQLAlchemyTransactionRunner:
    def test_commits_on_success(self, app, db, session):
        """
        GIVEN a SQLAlchemy runner
        WHEN the unit of work creates a user and returns normally
        THEN the row is committed and the return value passes through.
        """
        runner = SQLAlchemyTransactionRunner()

        result = runner.run(lambda uow: uow.users.create(_user()).id)

        assert result == "u-1"
        session.expire_all()
        assert session.get(User, "u-1") is not None

    def test_rolls_back_and_propagates_on_exception(self, app, db, session):
        """
        GIVEN a SQLAlchemy runner
        WHEN the unit of work writes and then raises
        THEN nothing is persisted and the same exception reaches the caller.
        """
        runner = SQLAlchemyTransactionRunner()

        def work(uow):
            uow.users.create(_user())
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            runner.run(work)
        assert session.query(User).count() == 0

    def test_rolls_back_on_base_exception(self, app, db, session):
        """
        GIVEN a SQLAlchemy runner
        WHEN the unit of work is interrupted (``KeyboardInterrupt``)
        THEN the transaction is rolled back and the interrupt propagates.
        """
        runner = SQLAlchemyTransactionRunner()

        def work(uow):
            uow.users.create(_user())
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            runner.run(work)
        assert session.query(User).count() == 0

    def test_wraps_storage_errors(self, app, db, session):
        """
        GIVEN a SQLAlchemy runner
        WHEN the storage engine fails
        THEN an InfrastructureError is raised with the engine error as cause.
        """
        runner = SQLAlchemyTransactionRunner()

        def work(uow):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        with pytest.raises(InfrastructureError) as err:
            runner.run(work)
        assert isinstance(err.value.__cause__, OperationalError)

    def test_stores_share_one_transaction(self, app, db, session):
        """
        GIVEN a SQLAlchemy runner
        WHEN one unit of work writes to two stores and then fails
        THEN neither write survives.
        """
        runner = SQLAlchemyTransactionRunner()

        def work(uow):
            uow.users.create(_user())
            uow.refresh_tokens.create(_token("tok-1"))
            raise RuntimeError("late failure")

        with pytest.raises(RuntimeError):
            runner.run(work)
        assert session.query(User).count() == 0
        assert session.query(RefreshToken).count() == 0


class TestInMemoryTransactionRunner:
    def test_commits_on_success(self):
        """
        GIVEN an in-memory runner
        WHEN the unit of work returns normally
        THEN its writes become the committed state.
        """
        runner = InMemoryTransactionRunner()

        runner.run(lambda uow: uow.users.create(_user()))

        assert "u-1" in runner.users
        assert runner.commits == 1

    def test_rolls_back_every_store_on_exception(self):
        """
        GIVEN committed state in the in-memory runner
        WHEN a unit of work deletes and inserts across stores then fails
        THEN the committed state is unchanged.
        """
        runner = InMemoryTransactionRunner()
        runner.users["u-1"] = _user()
        runner.refresh_tokens["tok-1"] = _token("tok-1")

        def work(uow):
            uow.refresh_tokens.delete_all_by_user("u-1")
            uow.users.create(_user("u-2", "b@example.com"))
            raise ValueError("nope")

        with pytest.raises(ValueError):
            runner.run(work)

        assert list(runner.users) == ["u-1"]
        assert list(runner.refresh_tokens) == ["tok-1"]
        assert runner.rollbacks == 1
        assert runner.commits == 0

    def test_rolls_back_on_base_exception(self):
        runner = InMemoryTransactionRunner()

        def work(uow):
            uow.users.create(_user())
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            runner.run(work)
        assert runner.users == {}
