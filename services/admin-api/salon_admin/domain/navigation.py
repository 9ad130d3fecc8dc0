"""Route table and role gate for the staff web application."""

from __future__ import annotations

from dataclasses import dataclass

from .account import Profile, Role

ACCESS_DENIED_ALERT = "Access denied: administrators only."
LOGIN_PATH = "/login"
HOME_PATH = "/"


@dataclass(frozen=True, slots=True)
class Route:
    path: str
    name: str | None
    requires_auth: bool = False
    requires_admin: bool = False
    children: tuple["Route", ...] = ()


ROUTES: tuple[Route, ...] = (
    Route(LOGIN_PATH, "login"),
    Route(
        HOME_PATH,
        None,
        requires_auth=True,
        children=(
            Route("", "dashboard"),
            Route("calendario", "calendar"),
            Route("servicios", "services"),
            Route("clientes", "clients"),
            Route("equipo", "team", requires_auth=True, requires_admin=True),
            Route("configuracion", "settings", requires_auth=True, requires_admin=True),
            Route("fichar", "timetracker"),
            Route("control-horario", "admintime", requires_auth=True, requires_admin=True),
            Route("reportes", "reports", requires_auth=True, requires_admin=True),
        ),
    ),
)


@dataclass(frozen=True, slots=True)
class SessionContext:
    """Caller state the guard decides on, built server-side for every check."""

    authenticated: bool = False
    role: str | None = None
    active: bool = False

    @classmethod
    def anonymous(cls) -> "SessionContext":
        return cls()

    @classmethod
    def from_profile(cls, profile: Profile | None) -> "SessionContext":
        """Build the context from a freshly read profile; inactive staff have no session."""
        if profile is None or not profile.is_active:
            return cls.anonymous()
        return cls(authenticated=True, role=profile.role, active=True)

    @property
    def signed_in(self) -> bool:
        return self.authenticated and self.active

    @property
    def is_admin(self) -> bool:
        return self.signed_in and self.role == Role.admin.value


@dataclass(frozen=True, slots=True)
class NavigationDecision:
    allowed: bool
    redirect: str | None = None
    alert: str | None = None
    route: str | None = None


def _normalise(path: str) -> str:
    return "/" + path.strip().split("?", 1)[0].split("#", 1)[0].strip("/")


def _join(parent: str, child: str) -> str:
    if not child:
        return parent
    return parent.rstrip("/") + "/" + child


def match_route(path: str, routes: tuple[Route, ...] = ROUTES) -> list[Route]:
    """Return the matched route chain (parent first) for ``path``, or an empty list."""
    target = _normalise(path)
    for route in routes:
        if not route.children:
            if _normalise(route.path) == target:
                return [route]
            continue
        for child in route.children:
            if _normalise(_join(route.path, child.path)) == target:
                return [route, child]
    return []


def resolve_navigation(path: str, session: SessionContext) -> NavigationDecision:
    """Decide whether ``session`` may open ``path``, mirroring the client guard order."""
    matched = match_route(path)
    name = matched[-1].name if matched else None

    if any(route.requires_auth for route in matched) and not session.signed_in:
        return NavigationDecision(allowed=False, redirect=LOGIN_PATH, route=name)
    if any(route.requires_admin for route in matched) and not session.is_admin:
        return NavigationDecision(
            allowed=False, redirect=HOME_PATH, alert=ACCESS_DENIED_ALERT, route=name
        )
    if _normalise(path) == LOGIN_PATH and session.signed_in:
        return NavigationDecision(allowed=False, redirect=HOME_PATH, route=name)
    return NavigationDecision(allowed=True, route=name)
