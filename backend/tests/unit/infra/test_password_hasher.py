"""Unit tests for the werkzeug password hasher."""

from __future__ import annotations

import pytest

from travel_api.infra.security.password_hasher import WerkzeugPasswordHasher


@pytest.fixture()
def hasher() -> WerkzeugPasswordHasher:
    return WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")


def test_hash_is_salted_and_verifiable(hasher):
    first = hasher.hash("s3cret-pass")
    second = hasher.hash("s3cret-pass")

    assert first != second
    assert "s3cret-pass" not in first
    assert hasher.verify(first, "s3cret-pass")
    assert not hasher.verify(first, "wrong")


def test_verify_against_empty_hash_is_false(hasher):
    assert hasher.verify("", "anything") is False


def test_empty_password_cannot_be_hashed(hasher):
    with pytest.raises(ValueError):
        hasher.hash("")
