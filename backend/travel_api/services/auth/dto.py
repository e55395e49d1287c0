"""Immutable inputs and outputs of :class:`~travel_api.services.auth.service.AuthService`.

Views build the inputs from validated request bodies; the outputs are dumped
by the response schemas. None of them carries ORM state.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """New account request. The service trims ``username``, normalises
    ``email`` and hashes ``password`` before anything is stored."""

    username: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """Refresh token presented for rotation."""

    refresh_token: str


@dataclass(frozen=True, slots=True)
class RevokeIn:
    """Refresh token presented on logout."""

    refresh_token: str


@dataclass(frozen=True, slots=True)
class RegisterOut:
    user_id: str


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Credentials issued by login and refresh.

    :param access_token: Short-lived signed JWT for ``Authorization: Bearer``.
    :param refresh_token: Opaque, single-use rotation handle.
    """

    access_token: str
    refresh_token: str

    def __repr__(self) -> str:
        # Bearer values stay out of logs and tracebacks
        return "TokenPairOut(access_token=***, refresh_token=***)"


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """Profile returned by ``/auth/me``; never includes the password hash."""

    id: str
    username: str
    email: str
    created_at: datetime


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Lifetimes applied when a token pair is issued.

    :param access_expires: Validity of the signed access token.
    :param refresh_expires: Validity of each refresh token, counted from issue.
    """

    access_expires: timedelta
    refresh_expires: timedelta
