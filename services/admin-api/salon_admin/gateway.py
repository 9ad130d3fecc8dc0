"""Platform gateway for identity and profile data held in Supabase."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx
from supabase import AuthError, Client, ClientOptions, PostgrestAPIError, create_client

from .config import Settings
from .domain.account import Account, Profile
from .domain.errors import UpstreamError

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"
PROFILE_COLUMNS = "id, email, full_name, role, color, is_active"


def build_admin_client(settings: Settings) -> Client:
    """Create the service-role client; it never stores or refreshes a session."""
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )


def _upstream(exc: AuthError | PostgrestAPIError | httpx.HTTPError) -> UpstreamError:
    """Wrap a platform or transport failure, keeping its message."""
    if isinstance(exc, httpx.HTTPError):
        return UpstreamError(str(exc) or exc.__class__.__name__)
    return UpstreamError(exc.message or str(exc))


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    # platform timestamps are RFC 3339 with a trailing Z and a fraction of any length
    return datetime.fromisoformat(str(value))


class PlatformGateway:
    """Supabase-backed account and profile persistence.

    Every platform failure is re-raised as :class:`UpstreamError` carrying the
    platform's own message.
    """

    def __init__(self, client: Client) -> None:
        """Store the service-role client used for all platform interactions."""
        self._client = client

    def create_identity(self, email: str, password: str) -> Account:
        """Create a pre-confirmed identity and return it as an ``Account``."""
        try:
            response = self._client.auth.admin.create_user(
                {"email": email, "password": password, "email_confirm": True}
            )
        except (AuthError, httpx.HTTPError) as exc:
            raise _upstream(exc) from exc
        return self._map_user(response.user.model_dump(mode="json"))

    def delete_identity(self, account_id: str) -> None:
        try:
            self._client.auth.admin.delete_user(account_id)
        except (AuthError, httpx.HTTPError) as exc:
            raise _upstream(exc) from exc

    def set_ban_duration(self, account_id: str, duration: str) -> Account:
        """Apply a ban of ``duration`` (``"0s"`` clears it) to the identity."""
        try:
            response = self._client.auth.admin.update_user_by_id(
                account_id, {"ban_duration": duration}
            )
        except (AuthError, httpx.HTTPError) as exc:
            raise _upstream(exc) from exc
        return self._map_user(response.user.model_dump(mode="json"))

    def list_accounts(self, per_page: int = 200) -> list[Account]:
        """Return every identity, walking the admin listing page by page."""
        accounts: list[Account] = []
        page = 1
        while True:
            try:
                users = self._client.auth.admin.list_users(page=page, per_page=per_page)
            except (AuthError, httpx.HTTPError) as exc:
                raise _upstream(exc) from exc
            accounts.extend(self._map_user(user.model_dump(mode="json")) for user in users)
            if len(users) < per_page:
                return accounts
            page += 1

    def insert_profile(self, profile: Profile) -> None:
        try:
            self._client.table(PROFILES_TABLE).insert(
                {
                    "id": profile.id,
                    "email": profile.email,
                    "full_name": profile.full_name,
                    "role": profile.role,
                    "color": profile.color,
                }
            ).execute()
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            raise _upstream(exc) from exc

    def update_profile(self, profile_id: str, fields: dict[str, Any]) -> None:
        """Update the given columns of one profile row, matched by primary key."""
        try:
            self._client.table(PROFILES_TABLE).update(fields).eq("id", profile_id).execute()
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            raise _upstream(exc) from exc

    def get_profile(self, profile_id: str) -> Profile | None:
        try:
            response = (
                self._client.table(PROFILES_TABLE)
                .select(PROFILE_COLUMNS)
                .eq("id", profile_id)
                .limit(1)
                .execute()
            )
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            raise _upstream(exc) from exc
        if not response.data:
            return None
        return self._map_profile(response.data[0])

    def list_profiles(self) -> list[Profile]:
        try:
            response = self._client.table(PROFILES_TABLE).select(PROFILE_COLUMNS).execute()
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            raise _upstream(exc) from exc
        return [self._map_profile(row) for row in response.data]

    def _map_user(self, user: dict[str, Any]) -> Account:
        """Convert a serialised platform user into the domain ``Account``."""
        return Account(
            account_id=user["id"],
            email=user.get("email") or "",
            banned_until=_parse_timestamp(user.get("banned_until")),
            raw=user,
        )

    def _map_profile(self, row: dict[str, Any]) -> Profile:
        return Profile(
            id=row["id"],
            email=row.get("email") or "",
            full_name=row.get("full_name") or "",
            role=row.get("role") or "",
            color=row.get("color") or "",
            is_active=row.get("is_active", True) is not False,
        )
