from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from sitefunds.auth.permissions import (
    capabilities_for_role,
    check_capability,
    has_any_role,
    has_permission,
    is_at_least_role,
    normalize_role,
)
from sitefunds.client.api import ApiClient, ApiError
from sitefunds.observability import log_event

SESSION_PATH = "/api/auth/user"


@dataclass(frozen=True)
class SessionState:
    user: dict[str, Any] | None = None
    is_loading: bool = True
    error: ApiError | None = None

    @property
    def is_authenticated(self) -> bool:
        return not self.is_loading and self.error is None and self.user is not None

    @property
    def original_role(self) -> str | None:
        if not self.user:
            return None
        return self.user.get("role")

    @property
    def role(self) -> str:
        """Normalized role; unauthenticated and unloaded sessions read as viewer."""
        return normalize_role(self.original_role)


class SessionPermissions:
    """Permission checks bound to one session's role."""

    def __init__(self, state: SessionState):
        self._state = state
        # Absent sessions carry no role, so every allow-list check fails.
        self._role = state.original_role if state.is_authenticated else None

    @property
    def role(self) -> str:
        return normalize_role(self._role)

    def has_permission(self, permission: str) -> bool:
        return has_permission(self._role, permission)

    def check(self, capability: str) -> bool:
        return check_capability(self._role, capability)

    def has_any_role(self, roles: Iterable[str]) -> bool:
        return has_any_role(self._role, roles)

    def is_at_least(self, minimum_role: str) -> bool:
        if self._role is None:
            return False
        return is_at_least_role(self._role, minimum_role)

    @property
    def capabilities(self) -> dict[str, bool]:
        return capabilities_for_role(self._role)

    @property
    def is_console_manager(self) -> bool:
        return self._role is not None and self.role == "console_manager"

    @property
    def is_admin(self) -> bool:
        return self._role is not None and self.role == "admin"

    @property
    def is_team_leader(self) -> bool:
        return self._role is not None and self.role == "team_leader"

    @property
    def is_viewer(self) -> bool:
        return self._role is not None and self.role == "viewer"


class SessionAccessor:
    """Resolves the current user once per session.

    The session endpoint is fetched at most once until ``reset`` is called;
    failures are not retried. A 401 means "not logged in", any other failure
    leaves the session unauthenticated with the error attached.
    """

    def __init__(self, api: ApiClient, *, stale_seconds: float = 60.0):
        self.api = api
        self.stale_seconds = stale_seconds
        self._state = SessionState()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def permissions(self) -> SessionPermissions:
        return SessionPermissions(self._state)

    def load(self) -> SessionState:
        if not self._state.is_loading:
            return self._state
        try:
            user = self.api.query(SESSION_PATH, stale_seconds=self.stale_seconds)
        except ApiError as exc:
            if exc.is_unauthorized:
                self._state = SessionState(user=None, is_loading=False)
            else:
                log_event(
                    "session_fetch_failed",
                    level=logging.WARNING,
                    status_code=exc.status_code,
                    error=str(exc),
                )
                self._state = SessionState(user=None, is_loading=False, error=exc)
            return self._state

        self._state = SessionState(user=user or None, is_loading=False)
        return self._state

    def reset(self) -> None:
        """Start a new session, e.g. after login or logout."""
        self.api.cache.invalidate([SESSION_PATH])
        self._state = SessionState()
