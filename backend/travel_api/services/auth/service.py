# travel_api/services/auth/service.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta

from travel_api.services._shared.base import BaseService
from travel_api.services._shared.errors import (
    ConflictError,
    ConsistencyError,
    DuplicateRecordError,
    EmailAlreadyExistsError,
    InfrastructureError,
    InvalidCredentialsError,
    NotFoundError,
    TokenExpiredError,
    TokenNotFoundError,
    TokenRevokedError,
    UsernameAlreadyExistsError,
    ValidationFailedError,
)
from travel_api.services._shared.ports.clock import Clock
from travel_api.services._shared.ports.identifiers import (
    IdentifierGenerator,
    UrlSafeTokenGenerator,
    UUIDGenerator,
)
from travel_api.services._shared.ports.password_hasher import PasswordHasher
from travel_api.services._shared.ports.refresh_token_store import (
    MAX_TOKEN_ID_LENGTH,
    RefreshTokenRecord,
    RotationResult,
)
from travel_api.services._shared.ports.revoked_token_store import RevokedTokenRecord
from travel_api.services._shared.ports.token_signer import InvalidTokenError, TokenSigner
from travel_api.services._shared.ports.transaction import AuthUnitOfWork, TransactionRunner
from travel_api.services._shared.ports.user_store import UserRecord, normalize_email

# DTOs
from travel_api.services.auth.dto import (
    AuthTokenConfig,
    LoginIn,
    RefreshIn,
    RegisterIn,
    RegisterOut,
    RevokeIn,
    TokenPairOut,
    UserPublicOut,
)

log = logging.getLogger(__name__)

# Compared against when the email is unknown so both login failures cost one hash check
_DUMMY_PASSWORD = "".join(["not", "-a-", "password"])


class AuthService(BaseService):
    """
    Authentication lifecycle service (register / login / refresh / logout).

    Access tokens are signed by a pluggable :class:`TokenSigner`; refresh
    tokens are opaque random identifiers persisted in the refresh token
    store. Every refresh consumes its token: the row is deleted, tombstoned,
    and replaced by a successor inside a single unit of work. Presenting a
    tombstoned token again is treated as theft and revokes every active
    refresh token of the owning user.
    """

    def __init__(
        self,
        *,
        runner: TransactionRunner,
        signer: TokenSigner,
        hasher: PasswordHasher,
        clock: Clock | None = None,
        user_ids: IdentifierGenerator | None = None,
        token_ids: IdentifierGenerator | None = None,
        token_cfg: AuthTokenConfig | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param runner: Executes units of work atomically.
        :param signer: Adapter for signing/verifying access tokens.
        :param hasher: Password hashing adapter.
        :param clock: Time source for expiries and timestamps.
        :param user_ids: Generator for new user ids (uuid4 by default).
        :param token_ids: Generator for refresh token ids (32 random bytes by default).
        :param token_cfg: Access/Refresh expiry configuration.
        """
        super().__init__(runner=runner, clock=clock)
        self.signer = signer
        self.hasher = hasher
        self.user_ids = user_ids or UUIDGenerator()
        self.token_ids = token_ids or UrlSafeTokenGenerator()
        self.cfg = token_cfg or AuthTokenConfig(
            access_expires=timedelta(minutes=15),
            refresh_expires=timedelta(days=7),
        )
        self._dummy_hash: str | None = None

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> RegisterOut:
        """
        Create a user account. No token is issued.

        :param dto: Registration input.
        :returns: Identifier of the new user.
        :raises ValidationFailedError: If a field is blank.
        :raises EmailAlreadyExistsError: If the email is taken.
        :raises UsernameAlreadyExistsError: If the username is taken.
        """
        username = (dto.username or "").strip()
        email = normalize_email(dto.email or "")
        if not username:
            raise ValidationFailedError("Username is required.", field="username")
        if not email:
            raise ValidationFailedError("Email is required.", field="email")
        if not dto.password:
            raise ValidationFailedError("Password is required.", field="password")

        # Hashing is slow; keep it outside the transaction
        password_hash = self.hasher.hash(dto.password)

        def _work(uow: AuthUnitOfWork) -> RegisterOut:
            if uow.users.find_by_email(email) is not None:
                raise EmailAlreadyExistsError()
            if uow.users.find_by_username(username) is not None:
                raise UsernameAlreadyExistsError()

            now = self.now_utc()
            record = UserRecord(
                id=self.user_ids.new_id(),
                username=username,
                email=email,
                password_hash=password_hash,
                created_at=now,
                updated_at=now,
            )
            uow.users.create(record)
            return RegisterOut(user_id=record.id)

        try:
            out = self.in_transaction(_work)
        except DuplicateRecordError as exc:
            # Lost a race against a concurrent registration
            if exc.field == "email":
                raise EmailAlreadyExistsError() from exc
            if exc.field == "username":
                raise UsernameAlreadyExistsError() from exc
            raise ConflictError("User", str(exc)) from exc

        log.info("auth.register.succeeded", extra={"user_id": out.user_id})
        return out

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> TokenPairOut:
        """
        Authenticate credentials and issue a fresh token pair.

        :param dto: Login input.
        :returns: Access/Refresh token pair.
        :raises InvalidCredentialsError: If the email is unknown or the password is wrong.
        """
        email = normalize_email(dto.email or "")
        user = self.in_transaction(lambda uow: uow.users.find_by_email(email)) if email else None

        # Hash checks are slow; no connection is held while they run
        if user is None:
            self.hasher.verify(self._get_dummy_hash(), dto.password or "")
            verified = False
        else:
            verified = self.hasher.verify(user.password_hash, dto.password or "")
        if not verified or user is None:
            log.info("auth.login.failed")
            raise InvalidCredentialsError()

        user_id = user.id
        pair = self.in_transaction(lambda uow: self._issue_pair(uow, user_id, self.now_utc()))
        log.info("auth.login.succeeded", extra={"user_id": user_id})
        return pair

    # ------------------------------------------------------------------ #
    # Refresh with rotation and replay detection
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        Security
        --------
        - The presented token is consumed: deleted and tombstoned in the same
          transaction that creates its successor.
        - **Reuse detection**: a tombstoned token revokes every active refresh
          token of its user. That deletion is committed even though the call
          fails with :class:`TokenRevokedError`.
        - Two concurrent refreshes of one token never both succeed; the loser
          sees :class:`TokenNotFoundError` or :class:`TokenRevokedError`.
        - Rotation and containment of one user hold that user's row lock, so a
          containment never misses a successor issued by a sibling rotation.

        :raises TokenNotFoundError: Unknown, malformed or concurrently consumed token.
        :raises TokenExpiredError: Token past its expiry (left in place).
        :raises TokenRevokedError: Token already consumed.
        :raises ConsistencyError: Token is both active and tombstoned.
        """
        token_id = self._parse_refresh_token(dto.refresh_token)

        def _work(
            uow: AuthUnitOfWork,
        ) -> tuple[RotationResult, str | None, TokenPairOut | None]:
            now = self.now_utc()
            owner = self._lock_token_owner(uow, token_id)
            if owner is None:
                return RotationResult.NOT_FOUND, None, None

            # Re-read under the owner lock: a rotation or containment of this
            # user that committed meanwhile is visible now
            tombstone = uow.revoked_tokens.find_by_id(token_id)
            current = uow.refresh_tokens.find_by_id(token_id, for_update=True)

            if tombstone is not None and current is not None:
                log.error(
                    "auth.refresh.consistency_fault",
                    extra={"user_id": current.user_id},
                )
                raise ConsistencyError("Refresh token is both active and revoked")

            if tombstone is not None:
                revoked = uow.refresh_tokens.delete_all_by_user(tombstone.user_id)
                log.warning(
                    "auth.refresh.reuse_detected",
                    extra={"user_id": tombstone.user_id, "revoked_count": revoked},
                )
                return RotationResult.REVOKED, tombstone.user_id, None

            if current is None:
                return RotationResult.NOT_FOUND, None, None

            if current.is_expired(now):
                return RotationResult.EXPIRED, current.user_id, None

            if not uow.refresh_tokens.delete_by_id(token_id):
                # A concurrent rotation consumed it between our read and delete
                return RotationResult.NOT_FOUND, current.user_id, None

            uow.revoked_tokens.create(
                RevokedTokenRecord(
                    token_id=token_id,
                    user_id=current.user_id,
                    expires_at=current.expires_at,
                    revoked_at=now,
                )
            )
            pair = self._issue_pair(uow, current.user_id, now)
            return RotationResult.OK, current.user_id, pair

        try:
            result, user_id, pair = self.in_transaction(_work)
        except DuplicateRecordError as exc:
            # Tombstone insert lost the race against a concurrent rotation
            raise TokenRevokedError() from exc

        if result is RotationResult.REVOKED:
            raise TokenRevokedError()
        if result is RotationResult.NOT_FOUND:
            raise TokenNotFoundError()
        if result is RotationResult.EXPIRED:
            log.info("auth.refresh.expired", extra={"user_id": user_id})
            raise TokenExpiredError()
        if result is not RotationResult.OK or pair is None:
            raise InfrastructureError("Unable to refresh token.")

        log.info("auth.refresh.rotated", extra={"user_id": user_id})
        return pair

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def revoke(self, dto: RevokeIn) -> None:
        """
        Revoke a refresh token (logout).

        The token is deleted and tombstoned; no other token of the user is
        touched.

        :raises TokenNotFoundError: Unknown or malformed token.
        :raises TokenRevokedError: Token already consumed.
        """
        token_id = self._parse_refresh_token(dto.refresh_token)

        def _work(uow: AuthUnitOfWork) -> str:
            if uow.revoked_tokens.exists(token_id):
                raise TokenRevokedError()
            current = uow.refresh_tokens.find_by_id(token_id, for_update=True)
            if current is None or not uow.refresh_tokens.delete_by_id(token_id):
                raise TokenNotFoundError()
            uow.revoked_tokens.create(
                RevokedTokenRecord(
                    token_id=token_id,
                    user_id=current.user_id,
                    expires_at=current.expires_at,
                    revoked_at=self.now_utc(),
                )
            )
            return current.user_id

        try:
            user_id = self.in_transaction(_work)
        except DuplicateRecordError as exc:
            raise TokenRevokedError() from exc

        log.info("auth.logout.succeeded", extra={"user_id": user_id})

    # ------------------------------------------------------------------ #
    # Access token checks / identity
    # ------------------------------------------------------------------ #

    def authenticate(self, access_token: str) -> str:
        """
        Resolve the user id carried by an access token.

        :raises InvalidCredentialsError: For any unusable token.
        """
        if not access_token:
            raise InvalidCredentialsError()
        try:
            return self.signer.verify(access_token)
        except InvalidTokenError as exc:
            raise InvalidCredentialsError() from exc

    def get_user(self, user_id: str) -> UserPublicOut:
        """
        Return the public view of a user.

        :raises NotFoundError: If the user does not exist.
        """

        def _work(uow: AuthUnitOfWork) -> UserRecord | None:
            return uow.users.find_by_id(user_id)

        user = self.in_transaction(_work)
        if user is None:
            raise NotFoundError("User", user_id)
        return UserPublicOut(
            id=user.id,
            username=user.username,
            email=user.email,
            created_at=user.created_at,
        )

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _issue_pair(self, uow: AuthUnitOfWork, user_id: str, now: datetime) -> TokenPairOut:
        """Persist a new refresh token and sign a matching access token."""
        refresh = RefreshTokenRecord(
            id=self.token_ids.new_id(),
            user_id=user_id,
            expires_at=now + self.cfg.refresh_expires,
            created_at=now,
        )
        uow.refresh_tokens.create(refresh)
        try:
            access = self.signer.sign(user_id, now + self.cfg.access_expires)
        except Exception as exc:
            raise InfrastructureError("Unable to sign access token.") from exc
        return TokenPairOut(access_token=access, refresh_token=refresh.id)

    @staticmethod
    def _lock_token_owner(uow: AuthUnitOfWork, token_id: str) -> str | None:
        """
        Lock the user owning ``token_id`` (active or tombstoned).

        Rotation and containment both start here, so under READ COMMITTED a
        containment ``DELETE`` cannot miss a successor committed by a sibling
        rotation of the same user.

        :returns: Owner id, or ``None`` when the token was never issued.
        """
        tombstone = uow.revoked_tokens.find_by_id(token_id)
        if tombstone is not None:
            owner = tombstone.user_id
        else:
            current = uow.refresh_tokens.find_by_id(token_id)
            if current is None:
                return None
            owner = current.user_id
        uow.users.find_by_id(owner, for_update=True)
        return owner

    @staticmethod
    def _parse_refresh_token(raw: str | None) -> str:
        """
        Return the token id carried by a refresh bearer value.

        The value is opaque and compared as sent; surrounding whitespace makes
        it unknown rather than being trimmed away.
        """
        token_id = raw or ""
        if not token_id or token_id != token_id.strip() or len(token_id) > MAX_TOKEN_ID_LENGTH:
            raise TokenNotFoundError()
        return token_id

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self.hasher.hash(_DUMMY_PASSWORD)
        return self._dummy_hash
