import logging
from dataclasses import dataclass

from sitefunds.auth.permissions import is_known_role, normalize_role, permissions_for_role
from sitefunds.observability import incr_metric, log_event


@dataclass
class AuthContext:
    """Identity context for authenticated requests. Role is read-only for the session."""
    tenant_id: str
    user_id: str
    role: str
    email: str | None = None
    raw_role: str | None = None
    auth_method: str = "session"
    permissions: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.raw_role is None:
            self.raw_role = self.role
        self.role = normalize_role(self.role)
        if not is_known_role(self.role):
            # Unknown roles are denied everywhere rather than rejected.
            incr_metric("auth_unrecognized_role", role=self.role)
            log_event(
                "auth_unrecognized_role",
                level=logging.WARNING,
                user_id=self.user_id,
                tenant_id=self.tenant_id,
                role=self.role,
            )
        if self.permissions:
            self.permissions = tuple(sorted(set(self.permissions)))
            return
        self.permissions = tuple(sorted(permissions_for_role(self.role)))
