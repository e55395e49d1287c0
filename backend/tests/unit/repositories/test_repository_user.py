"""Unit tests for UserRepository."""

from datetime import UTC, datetime

import pytest

from tests.factories.user import UserFactory
from travel_api.repositories.user import UserRepository
from travel_api.services._shared.errors import DuplicateRecordError
from travel_api.services._shared.ports import UserRecord


def _record(user_id, email, username):
    now = datetime(2024, 5, 1, 8, 30, tzinfo=UTC)
    return UserRecord(
        id=user_id,
        username=username,
        email=email,
        password_hash="hash",
        created_at=now,
        updated_at=now,
    )


class TestUserRepository:
    """Ensure ``UserRepository`` performs core persistence operations."""

    @pytest.fixture()
    def repo(self, session):
        return UserRepository()

    def test_find_by_email_is_case_insensitive(self, repo, session):
        """Fetch a user by email regardless of case and surrounding spaces."""
        u = UserFactory(email="Alice@Example.com", username="alice")
        session.commit()

        fetched = repo.find_by_email("  ALICE@example.COM ")
        assert fetched is not None
        assert fetched.id == u.id
        assert fetched.email == "alice@example.com"
        assert fetched.username == "alice"

    def test_find_by_username_and_id(self, repo, session):
        u = UserFactory(username="bob")
        session.commit()

        assert repo.find_by_username(" bob ").id == u.id
        assert repo.find_by_id(u.id).email == u.email
        assert repo.find_by_id("missing") is None
        assert repo.find_by_email("nobody@example.com") is None

    def test_find_by_id_can_lock_the_row(self, repo, session):
        """
        GIVEN a stored user
        WHEN it is fetched with ``for_update``
        THEN the same record comes back (SQLite ignores the lock clause).
        """
        u = UserFactory()
        user_id = u.id
        session.commit()

        assert repo.find_by_id(user_id, for_update=True).id == user_id
        assert repo.find_by_id("missing", for_update=True) is None

    def test_create_returns_utc_record(self, repo, session):
        created = repo.create(_record("u-1", "c@example.com", "carol"))
        session.commit()
        session.expire_all()

        fetched = repo.find_by_id("u-1")
        assert fetched == created
        assert fetched.created_at.tzinfo is not None
        assert fetched.created_at.utcoffset().total_seconds() == 0

    @pytest.mark.parametrize(
        ("email", "username", "field"),
        [("taken@example.com", "fresh", "email"), ("fresh@example.com", "taken", "username")],
    )
    def test_create_reports_duplicates(self, repo, session, email, username, field):
        """Uniqueness violations surface as DuplicateRecordError naming the field."""
        UserFactory(email="taken@example.com", username="taken")
        session.commit()

        with pytest.raises(DuplicateRecordError) as err:
            repo.create(_record("u-2", email, username))
        session.rollback()
        assert err.value.entity == "User"
        assert err.value.field == field
