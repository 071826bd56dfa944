from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Iterable
from urllib.parse import urlsplit

from sitefunds.auth.permissions import (
    CAPABILITY_PREDICATES,
    ROLE_PERMISSIONS,
    check_capability,
    has_any_role,
    has_permission,
)
from sitefunds.client.session import SessionState


class RouteOutcome(str, Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    RENDER = "render"


LOADING_PAGE: Final[str] = "loading"
LANDING_PAGE: Final[str] = "landing"
HOME_PAGE: Final[str] = "home"
DASHBOARD_PAGE: Final[str] = "dashboard"
NOT_FOUND_PAGE: Final[str] = "not_found"

PUBLIC_ROUTES: Final[dict[str, str]] = {
    "/login": LANDING_PAGE,
    "/change-password": "change_password",
}

PROTECTED_ROUTES: Final[dict[str, str]] = {
    "/projects": DASHBOARD_PAGE,
    "/allocations": DASHBOARD_PAGE,
    "/fund-allocation": DASHBOARD_PAGE,
    "/cost-entry": DASHBOARD_PAGE,
    "/transactions": DASHBOARD_PAGE,
    "/analytics": DASHBOARD_PAGE,
    "/audit": DASHBOARD_PAGE,
    "/users": "admin_users",
    "/admin/users": "admin_users",
    "/teams": "teams",
    "/companies": DASHBOARD_PAGE,
    "/permissions": DASHBOARD_PAGE,
    "/budget-amendments": DASHBOARD_PAGE,
    "/change-orders": DASHBOARD_PAGE,
    "/budget-history": DASHBOARD_PAGE,
}


@dataclass(frozen=True)
class RouteResolution:
    outcome: RouteOutcome
    page: str


def guard(is_authenticated: bool, is_loading: bool) -> RouteOutcome:
    if is_loading:
        return RouteOutcome.LOADING
    if not is_authenticated:
        return RouteOutcome.UNAUTHENTICATED
    return RouteOutcome.RENDER


def _normalize_path(path: str) -> str:
    path = urlsplit(path).path or "/"
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def resolve_route(path: str, session: SessionState) -> RouteResolution:
    """Pick the page for ``path`` given the current session state."""
    path = _normalize_path(path)

    if path in PUBLIC_ROUTES:
        return RouteResolution(RouteOutcome.RENDER, PUBLIC_ROUTES[path])

    if path == "/":
        outcome = guard(session.is_authenticated, session.is_loading)
        if outcome is RouteOutcome.LOADING:
            return RouteResolution(outcome, LOADING_PAGE)
        if outcome is RouteOutcome.UNAUTHENTICATED:
            return RouteResolution(outcome, HOME_PAGE)
        return RouteResolution(outcome, DASHBOARD_PAGE)

    target = PROTECTED_ROUTES.get(path)
    if target is None:
        return RouteResolution(RouteOutcome.RENDER, NOT_FOUND_PAGE)

    outcome = guard(session.is_authenticated, session.is_loading)
    if outcome is RouteOutcome.LOADING:
        return RouteResolution(outcome, LOADING_PAGE)
    if outcome is RouteOutcome.UNAUTHENTICATED:
        return RouteResolution(outcome, LANDING_PAGE)
    return RouteResolution(outcome, target)


def is_component_visible(
    role: str | None,
    *,
    required_roles: Iterable[str] | None = None,
    required_permission: str | None = None,
) -> bool:
    """Conditional-render check for a page fragment.

    ``required_permission`` may name a capability predicate
    (``can_manage_users``) or a permission (``USER_MANAGEMENT``). Names that are
    neither hide the fragment.
    """
    if required_roles is not None and not has_any_role(role, required_roles):
        return False
    if required_permission:
        if required_permission in CAPABILITY_PREDICATES:
            return check_capability(role, required_permission)
        if required_permission in ROLE_PERMISSIONS:
            return has_permission(role, required_permission)
        return False
    return True
