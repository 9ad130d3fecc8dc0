"""Staff account workflows orchestrating identity and profile updates."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from jwt import PyJWTError

from .account import Account, Profile
from .contracts import CreateUserInput, UpdateProfileInput
from .errors import ProfileNotFoundError, UpstreamError
from .navigation import NavigationDecision, SessionContext, resolve_navigation
from ..config import Settings
from ..security.tokens import decode_access_token

logger = logging.getLogger(__name__)

UNBAN_DURATION = "0s"


class Gateway(Protocol):
    def create_identity(self, email: str, password: str) -> Account: ...

    def delete_identity(self, account_id: str) -> None: ...

    def set_ban_duration(self, account_id: str, duration: str) -> Account: ...

    def list_accounts(self) -> list[Account]: ...

    def insert_profile(self, profile: Profile) -> None: ...

    def update_profile(self, profile_id: str, fields: dict[str, Any]) -> None: ...

    def get_profile(self, profile_id: str) -> Profile | None: ...

    def list_profiles(self) -> list[Profile]: ...


class InvalidTokenError(ValueError):
    """The bearer token is missing, malformed, expired or wrongly signed."""


@dataclass(slots=True)
class SessionInfo:
    """Identity of a signed-in caller with role data read from its profile."""

    user_id: str
    email: str
    profile: Profile | None

    @property
    def context(self) -> SessionContext:
        return SessionContext.from_profile(self.profile)


@dataclass(slots=True)
class ConsistencyIssue:
    account_id: str
    kind: str
    email: str | None = None


@dataclass(slots=True)
class ReconcileReport:
    checked: int = 0
    issues: list[ConsistencyIssue] = field(default_factory=list)
    applied: list[str] = field(default_factory=list)


class UserAdminService:
    """Account lifecycle workflows backed by the platform gateway.

    Each workflow is a short sequence of upstream calls without retries. A
    failure in any step aborts the remaining ones and propagates as
    :class:`UpstreamError`.
    """

    def __init__(self, gateway: Gateway, settings: Settings) -> None:
        """Store dependencies used to orchestrate identity and profile calls."""
        self._gateway = gateway
        self._settings = settings

    @property
    def enforces_admin_auth(self) -> bool:
        return self._settings.enforce_admin_auth

    def create_user(self, payload: CreateUserInput) -> Account:
        """Create the identity, then the profile row sharing its identifier."""
        logger.info("creating user %s (%s)", payload.email, payload.role)
        account = self._gateway.create_identity(payload.email, payload.password)
        profile = Profile(
            id=account.account_id,
            email=payload.email,
            full_name=payload.name,
            role=payload.role,
            color=payload.color or self._settings.default_profile_color,
        )
        try:
            self._gateway.insert_profile(profile)
        except UpstreamError:
            if not self._settings.rollback_orphaned_identity:
                logger.warning(
                    "profile insert failed, identity %s left without profile", account.account_id
                )
                raise
            logger.warning(
                "profile insert failed, deleting orphaned identity %s", account.account_id
            )
            self._gateway.delete_identity(account.account_id)
            raise
        logger.info("user %s created", account.account_id)
        return account

    def deactivate_user(self, account_id: str) -> None:
        """Hide the profile from listings, then ban the identity."""
        logger.info("deactivating user %s", account_id)
        self._gateway.update_profile(account_id, {"is_active": False})
        self._gateway.set_ban_duration(account_id, self._settings.ban_duration)

    def restore_user(self, account_id: str) -> None:
        """Show the profile again, then lift the identity ban."""
        logger.info("restoring user %s", account_id)
        self._gateway.update_profile(account_id, {"is_active": True})
        self._gateway.set_ban_duration(account_id, UNBAN_DURATION)

    def update_profile(self, account_id: str, payload: UpdateProfileInput) -> None:
        """Overwrite name, role and color; the identity is never touched."""
        self._gateway.update_profile(
            account_id,
            {"full_name": payload.name, "role": payload.role, "color": payload.color},
        )

    def get_session(self, token: str | None) -> SessionInfo:
        """Verify ``token`` and read the caller's profile fresh from the table."""
        if not token:
            raise InvalidTokenError("missing bearer token")
        try:
            claims = decode_access_token(token, self._settings.supabase_jwt_secret)
        except PyJWTError as exc:
            raise InvalidTokenError(f"invalid token: {exc}") from exc
        user_id = str(claims["sub"])
        return SessionInfo(
            user_id=user_id,
            email=str(claims.get("email") or ""),
            profile=self._gateway.get_profile(user_id),
        )

    def require_profile(self, token: str | None) -> SessionInfo:
        session = self.get_session(token)
        if session.profile is None:
            raise ProfileNotFoundError(f"no profile for user {session.user_id}")
        return session

    def resolve_navigation(self, path: str, token: str | None) -> NavigationDecision:
        """Run the role gate for ``path`` against server-side session state.

        An absent or invalid token is an anonymous session rather than an error.
        """
        context = SessionContext.anonymous()
        if token:
            try:
                context = self.get_session(token).context
            except InvalidTokenError as exc:
                logger.info("navigation check with unusable token: %s", exc)
        return resolve_navigation(path, context)

    def reconcile(self, apply: bool = False) -> ReconcileReport:
        """Compare profile active flags with identity ban state.

        Parameters
        ----------
        apply:
            When true, re-apply the ban state implied by each mismatched
            profile's ``is_active`` flag.
        """
        accounts = {account.account_id: account for account in self._gateway.list_accounts()}
        profiles = {profile.id: profile for profile in self._gateway.list_profiles()}
        report = ReconcileReport(checked=len(profiles))

        for profile_id, profile in profiles.items():
            account = accounts.get(profile_id)
            if account is None:
                report.issues.append(ConsistencyIssue(profile_id, "missing_identity", profile.email))
                continue
            banned = account.is_banned()
            if profile.is_active and banned:
                kind, duration = "active_but_banned", UNBAN_DURATION
            elif not profile.is_active and not banned:
                kind, duration = "inactive_but_not_banned", self._settings.ban_duration
            else:
                continue
            report.issues.append(ConsistencyIssue(profile_id, kind, profile.email))
            if apply:
                self._gateway.set_ban_duration(profile_id, duration)
                report.applied.append(profile_id)

        for account_id, account in accounts.items():
            if account_id not in profiles:
                report.issues.append(ConsistencyIssue(account_id, "orphaned_identity", account.email))

        for issue in report.issues:
            logger.warning("consistency issue %s for %s", issue.kind, issue.account_id)
        return report
