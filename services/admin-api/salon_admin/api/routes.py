"""HTTP route definitions for the admin API."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status
from prometheus_client import Counter
from pydantic import BaseModel, Field

from ..config import Settings, get_settings
from ..domain.contracts import CreateUserInput, UpdateProfileInput
from ..domain.errors import ProfileNotFoundError, UpstreamError
from ..domain.service import InvalidTokenError, ReconcileReport, UserAdminService
from ..security.tokens import bearer_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

OPERATIONS = Counter(
    "salon_admin_operations_total",
    "Admin lifecycle operations by outcome.",
    ["operation", "outcome"],
)


class CreateUserRequest(BaseModel):
    """Payload accepted when creating a staff account."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    role: str = Field(..., min_length=1)
    color: str | None = None


class UpdateUserRequest(BaseModel):
    """Full replacement of the editable profile fields."""

    name: str
    role: str
    color: str


class MessageResponse(BaseModel):
    message: str


class CreateUserResponse(BaseModel):
    """Response returned after creating the identity and its profile."""

    message: str
    user: dict[str, Any]


class SessionResponse(BaseModel):
    """Caller identity with role data read from the profiles table."""

    user_id: str
    email: str
    full_name: str
    role: str
    is_active: bool
    is_admin: bool


class NavigationRequest(BaseModel):
    path: str


class NavigationResponse(BaseModel):
    allowed: bool
    redirect: str | None = None
    alert: str | None = None
    route: str | None = None


class ConsistencyIssueEntry(BaseModel):
    account_id: str
    kind: str
    email: str | None = None


class ReconcileResponse(BaseModel):
    """Result of comparing profile flags with identity ban state."""

    checked: int
    issues: list[ConsistencyIssueEntry]
    applied: list[str]

    @classmethod
    def from_report(cls, report: ReconcileReport) -> "ReconcileResponse":
        return cls(
            checked=report.checked,
            issues=[
                ConsistencyIssueEntry(account_id=issue.account_id, kind=issue.kind, email=issue.email)
                for issue in report.issues
            ],
            applied=list(report.applied),
        )


class ClientConfigResponse(BaseModel):
    supabase_url: str
    supabase_anon_key: str


def get_service(request: Request) -> UserAdminService:
    """Resolve the `UserAdminService` stored on the FastAPI application state."""
    service: UserAdminService = request.app.state.user_admin_service
    return service


def require_admin(
    authorization: str | None = Header(default=None),
    service: UserAdminService = Depends(get_service),
) -> None:
    """Reject callers without an active admin profile when enforcement is on."""
    if not service.enforces_admin_auth:
        return
    try:
        session = service.get_session(bearer_token(authorization))
    except InvalidTokenError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    if not session.context.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="administrator role required"
        )


@contextmanager
def _tracked(operation: str, failure_prefix: str = "") -> Iterator[None]:
    try:
        yield
    except UpstreamError as exc:
        OPERATIONS.labels(operation=operation, outcome="error").inc()
        if failure_prefix:
            raise UpstreamError(f"{failure_prefix}{exc.message}") from exc
        raise
    OPERATIONS.labels(operation=operation, outcome="ok").inc()


@router.post(
    "/create-user",
    response_model=CreateUserResponse,
    dependencies=[Depends(require_admin)],
)
def create_user(
    payload: CreateUserRequest,
    service: UserAdminService = Depends(get_service),
) -> CreateUserResponse:
    """Create a pre-confirmed identity and its matching profile row."""
    with _tracked("create"):
        account = service.create_user(
            CreateUserInput(
                email=payload.email,
                password=payload.password,
                name=payload.name,
                role=payload.role,
                color=payload.color,
            )
        )
    return CreateUserResponse(message="User created successfully", user=account.raw)


@router.delete(
    "/delete-user/{user_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
def delete_user(
    user_id: str,
    service: UserAdminService = Depends(get_service),
) -> MessageResponse:
    """Soft delete: deactivate the profile and ban the identity."""
    with _tracked("deactivate", "Could not deactivate user: "):
        service.deactivate_user(user_id)
    return MessageResponse(message="User deactivated successfully")


@router.put(
    "/update-user/{user_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
def update_user(
    user_id: str,
    payload: UpdateUserRequest,
    service: UserAdminService = Depends(get_service),
) -> MessageResponse:
    """Overwrite name, role and color of a profile."""
    with _tracked("update"):
        service.update_profile(
            user_id, UpdateProfileInput(name=payload.name, role=payload.role, color=payload.color)
        )
    return MessageResponse(message="Updated")


@router.put(
    "/restore-user/{user_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
def restore_user(
    user_id: str,
    service: UserAdminService = Depends(get_service),
) -> MessageResponse:
    """Reactivate the profile and lift the identity ban."""
    with _tracked("restore", "Could not restore user: "):
        service.restore_user(user_id)
    return MessageResponse(message="User restored successfully")


@router.get("/session", response_model=SessionResponse)
def get_session(
    authorization: str | None = Header(default=None),
    service: UserAdminService = Depends(get_service),
) -> SessionResponse:
    """Return the caller's role as currently stored, for client-side gating."""
    try:
        session = service.require_profile(bearer_token(authorization))
    except InvalidTokenError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    except ProfileNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    profile = session.profile
    return SessionResponse(
        user_id=session.user_id,
        email=profile.email or session.email,
        full_name=profile.full_name,
        role=profile.role,
        is_active=profile.is_active,
        is_admin=session.context.is_admin,
    )


@router.post("/navigation/resolve", response_model=NavigationResponse)
def resolve_navigation(
    payload: NavigationRequest,
    authorization: str | None = Header(default=None),
    service: UserAdminService = Depends(get_service),
) -> NavigationResponse:
    """Evaluate the route guard for ``path`` using a server-side session context."""
    decision = service.resolve_navigation(payload.path, bearer_token(authorization))
    return NavigationResponse(
        allowed=decision.allowed,
        redirect=decision.redirect,
        alert=decision.alert,
        route=decision.route,
    )


@router.post(
    "/reconcile",
    response_model=ReconcileResponse,
    dependencies=[Depends(require_admin)],
)
def reconcile(
    apply: bool = Query(default=False),
    service: UserAdminService = Depends(get_service),
) -> ReconcileResponse:
    """Report, and optionally repair, profiles whose active flag disagrees with the ban."""
    with _tracked("reconcile"):
        report = service.reconcile(apply=apply)
    return ReconcileResponse.from_report(report)


@router.get("/client-config", response_model=ClientConfigResponse)
def client_config(settings: Settings = Depends(get_settings)) -> ClientConfigResponse:
    """Expose the public platform URL and anon key used by the browser client."""
    if not settings.public_supabase_url or not settings.public_supabase_anon_key:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="public platform configuration is missing",
        )
    return ClientConfigResponse(
        supabase_url=settings.public_supabase_url,
        supabase_anon_key=settings.public_supabase_anon_key,
    )
