"""Unit tests for the refresh token and revoked token repositories."""

from datetime import UTC, datetime, timedelta

import pytest

from tests.factories.token import RefreshTokenFactory, RevokedTokenFactory
from tests.factories.user import UserFactory
from travel_api.repositories import RefreshTokenRepository, RevokedTokenRepository
from travel_api.services._shared.errors import DuplicateRecordError
from travel_api.services._shared.ports import RefreshTokenRecord, RevokedTokenRecord

NOW = datetime(2024, 5, 1, 8, 30, tzinfo=UTC)


class TestRefreshTokenRepository:
    """Ensure ``RefreshTokenRepository`` honours the store contract."""

    @pytest.fixture()
    def repo(self, session):
        return RefreshTokenRepository()

    def test_create_and_find(self, repo, session):
        user = UserFactory()
        record = RefreshTokenRecord(
            id="tok-1", user_id=user.id, expires_at=NOW + timedelta(days=7), created_at=NOW
        )
        repo.create(record)
        session.commit()
        session.expire_all()

        assert repo.find_by_id("tok-1") == record
        assert repo.find_by_id("tok-1", for_update=True) == record
        assert repo.find_by_id("missing") is None

    def test_delete_by_id_reports_whether_a_row_was_removed(self, repo, session):
        token_id = RefreshTokenFactory().id
        session.commit()

        assert repo.delete_by_id(token_id) is True
        assert repo.delete_by_id(token_id) is False
        session.commit()
        assert repo.find_by_id(token_id) is None

    def test_delete_all_by_user_only_touches_that_user(self, repo, session):
        owner = UserFactory()
        owner_id = owner.id
        second_id = RefreshTokenFactory(user=owner).id
        RefreshTokenFactory(user=owner)
        other = RefreshTokenFactory()
        other_id, other_user_id = other.id, other.user_id
        session.commit()

        assert repo.delete_all_by_user(owner_id) == 2
        session.commit()
        assert repo.list_by_user(owner_id) == []
        assert [t.id for t in repo.list_by_user(other_user_id)] == [other_id]
        assert repo.find_by_id(second_id) is None

    def test_duplicate_id_is_reported(self, repo, session):
        token = RefreshTokenFactory()
        token_id, user_id = token.id, token.user_id
        session.commit()
        # Forget the loaded row so the database constraint is what rejects it
        session.expunge_all()

        with pytest.raises(DuplicateRecordError):
            repo.create(
                RefreshTokenRecord(id=token_id, user_id=user_id, expires_at=NOW, created_at=NOW)
            )
        session.rollback()


class TestRevokedTokenRepository:
    """Tombstones are append-only and keyed by token id."""

    @pytest.fixture()
    def repo(self, session):
        return RevokedTokenRepository()

    def test_create_exists_and_find(self, repo, session):
        record = RevokedTokenRecord(
            token_id="tok-1", user_id="u-1", expires_at=NOW + timedelta(days=7), revoked_at=NOW
        )
        repo.create(record)
        session.commit()
        session.expire_all()

        assert repo.exists("tok-1") is True
        assert repo.exists("tok-2") is False
        assert repo.find_by_id("tok-1") == record
        assert repo.find_by_id("tok-2") is None

    def test_second_tombstone_for_same_token_is_rejected(self, repo, session):
        tombstone = RevokedTokenFactory()
        token_id, user_id = tombstone.token_id, tombstone.user_id
        session.commit()
        session.expunge_all()

        with pytest.raises(DuplicateRecordError) as err:
            repo.create(
                RevokedTokenRecord(
                    token_id=token_id,
                    user_id=user_id,
                    expires_at=NOW,
                    revoked_at=NOW,
                )
            )
        session.rollback()
        assert err.value.field == "token_id"
