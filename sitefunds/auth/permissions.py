from __future__ import annotations

from typing import Final, Iterable

DEFAULT_ROLE: Final[str] = "viewer"

LEGACY_ROLE_ALIASES: Final[dict[str, str]] = {
    "manager": "admin",
    "user": "viewer",
}

CANONICAL_ROLES: Final[frozenset[str]] = frozenset({"console_manager", "admin", "team_leader", "viewer"})

# Ascending; index is the role's rank.
ROLE_HIERARCHY: Final[tuple[str, ...]] = ("viewer", "team_leader", "admin", "console_manager")

# Fund management
FUND_ALLOCATION: Final[str] = "FUND_ALLOCATION"
FUND_TRANSFERS: Final[str] = "FUND_TRANSFERS"
# Projects
PROJECT_CREATION: Final[str] = "PROJECT_CREATION"
PROJECT_EDITING: Final[str] = "PROJECT_EDITING"
PROJECT_DELETION: Final[str] = "PROJECT_DELETION"
# Teams
TEAM_MANAGEMENT: Final[str] = "TEAM_MANAGEMENT"
TEAM_MEMBER_ASSIGNMENT: Final[str] = "TEAM_MEMBER_ASSIGNMENT"
# Cost and revenue entry
COST_ENTRY: Final[str] = "COST_ENTRY"
REVENUE_ENTRY: Final[str] = "REVENUE_ENTRY"
COST_ALLOCATIONS: Final[str] = "COST_ALLOCATIONS"
TRANSACTION_CREATION: Final[str] = "TRANSACTION_CREATION"
LINE_ITEM_CREATION: Final[str] = "LINE_ITEM_CREATION"
MATERIAL_CREATION: Final[str] = "MATERIAL_CREATION"
# Budget amendments, change orders, approvals
BUDGET_AMENDMENTS: Final[str] = "BUDGET_AMENDMENTS"
CHANGE_ORDERS: Final[str] = "CHANGE_ORDERS"
APPROVAL_ACTIONS: Final[str] = "APPROVAL_ACTIONS"
# Users and tenants
USER_MANAGEMENT: Final[str] = "USER_MANAGEMENT"
USER_ROLE_UPDATE: Final[str] = "USER_ROLE_UPDATE"
USER_STATUS_UPDATE: Final[str] = "USER_STATUS_UPDATE"
PASSWORD_RESET: Final[str] = "PASSWORD_RESET"
PERMISSION_MANAGEMENT: Final[str] = "PERMISSION_MANAGEMENT"
COMPANY_MANAGEMENT: Final[str] = "COMPANY_MANAGEMENT"
# Import / export
DATA_EXPORT: Final[str] = "DATA_EXPORT"
DATA_IMPORT: Final[str] = "DATA_IMPORT"
# Viewing
VIEW_DASHBOARD: Final[str] = "VIEW_DASHBOARD"
VIEW_PROJECTS: Final[str] = "VIEW_PROJECTS"
VIEW_ALLOCATIONS: Final[str] = "VIEW_ALLOCATIONS"
VIEW_ANALYTICS: Final[str] = "VIEW_ANALYTICS"
VIEW_AUDIT_LOGS: Final[str] = "VIEW_AUDIT_LOGS"
VIEW_TRANSACTIONS: Final[str] = "VIEW_TRANSACTIONS"
# Coarse access levels
READ_ACCESS: Final[str] = "READ_ACCESS"
WRITE_ACCESS: Final[str] = "WRITE_ACCESS"
MANAGE_ACCESS: Final[str] = "MANAGE_ACCESS"

_ADMIN: Final[frozenset[str]] = frozenset({"admin"})
_OPERATORS: Final[frozenset[str]] = frozenset({"admin", "team_leader"})
_READERS: Final[frozenset[str]] = frozenset({"admin", "team_leader", "viewer"})
_CONSOLE: Final[frozenset[str]] = frozenset({"console_manager"})

# Each entry lists every role that passes. There is no inheritance between
# roles, so console_manager only appears where it is named.
ROLE_PERMISSIONS: Final[dict[str, frozenset[str]]] = {
    FUND_ALLOCATION: _OPERATORS,
    FUND_TRANSFERS: _OPERATORS,
    PROJECT_CREATION: _ADMIN,
    PROJECT_EDITING: _ADMIN,
    PROJECT_DELETION: _ADMIN,
    TEAM_MANAGEMENT: _OPERATORS,
    TEAM_MEMBER_ASSIGNMENT: _OPERATORS,
    COST_ENTRY: _OPERATORS,
    REVENUE_ENTRY: _OPERATORS,
    COST_ALLOCATIONS: _OPERATORS,
    TRANSACTION_CREATION: _OPERATORS,
    LINE_ITEM_CREATION: _OPERATORS,
    MATERIAL_CREATION: _OPERATORS,
    BUDGET_AMENDMENTS: _OPERATORS,
    CHANGE_ORDERS: _OPERATORS,
    APPROVAL_ACTIONS: _OPERATORS,
    USER_MANAGEMENT: _ADMIN,
    USER_ROLE_UPDATE: _ADMIN,
    USER_STATUS_UPDATE: _ADMIN,
    PASSWORD_RESET: _ADMIN,
    PERMISSION_MANAGEMENT: _ADMIN,
    COMPANY_MANAGEMENT: _CONSOLE,
    DATA_EXPORT: _OPERATORS,
    DATA_IMPORT: _ADMIN,
    VIEW_DASHBOARD: _READERS,
    VIEW_PROJECTS: _READERS,
    VIEW_ALLOCATIONS: _READERS,
    VIEW_ANALYTICS: _READERS,
    VIEW_AUDIT_LOGS: _READERS,
    VIEW_TRANSACTIONS: _READERS,
    READ_ACCESS: _READERS,
    WRITE_ACCESS: _OPERATORS,
    MANAGE_ACCESS: _ADMIN,
}

# Named capability predicates, evaluated through ROLE_PERMISSIONS.
CAPABILITY_PREDICATES: Final[dict[str, str]] = {
    "can_manage_companies": COMPANY_MANAGEMENT,
    "can_manage_users": USER_MANAGEMENT,
    "can_create_projects": PROJECT_CREATION,
    "can_edit_project_budgets": PROJECT_EDITING,
    "can_delete_projects": PROJECT_DELETION,
    "can_manage_fund_allocations": FUND_ALLOCATION,
    "can_manage_fund_transfers": FUND_TRANSFERS,
    "can_reset_user_passwords": PASSWORD_RESET,
    "can_update_user_roles": USER_ROLE_UPDATE,
    "can_update_user_status": USER_STATUS_UPDATE,
    "can_import_data": DATA_IMPORT,
    "can_create_cost_allocations": COST_ALLOCATIONS,
    "can_create_transactions": TRANSACTION_CREATION,
    "can_create_line_items": LINE_ITEM_CREATION,
    "can_create_materials": MATERIAL_CREATION,
    "can_enter_revenue": REVENUE_ENTRY,
    "can_export_data": DATA_EXPORT,
    "can_manage_teams": TEAM_MANAGEMENT,
    "can_assign_team_members": TEAM_MEMBER_ASSIGNMENT,
    "can_propose_budget_amendments": BUDGET_AMENDMENTS,
    "can_propose_change_orders": CHANGE_ORDERS,
    "can_approve": APPROVAL_ACTIONS,
    "can_view_dashboard": VIEW_DASHBOARD,
    "can_view_analytics": VIEW_ANALYTICS,
    "can_view_projects": VIEW_PROJECTS,
    "can_view_transactions": VIEW_TRANSACTIONS,
    "can_view_audit_logs": VIEW_AUDIT_LOGS,
    "can_view_allocations": VIEW_ALLOCATIONS,
    "can_access_cost_entry": COST_ENTRY,
    "can_access_user_management": USER_MANAGEMENT,
    "can_access_permissions": PERMISSION_MANAGEMENT,
    "can_access_company_management": COMPANY_MANAGEMENT,
    "can_read": READ_ACCESS,
    "can_write": WRITE_ACCESS,
    "can_manage": MANAGE_ACCESS,
}


def normalize_role(role: str | None) -> str:
    """Map legacy role names onto the current role set.

    Absent or empty input is treated as ``viewer``. Strings that are neither a
    current role nor a legacy alias are returned unchanged; they appear in no
    allow-list, so every check against them fails.
    """
    if not role:
        return DEFAULT_ROLE
    return LEGACY_ROLE_ALIASES.get(role, role)


def is_known_role(role: str | None) -> bool:
    return normalize_role(role) in CANONICAL_ROLES


def has_permission(role: str | None, permission: str) -> bool:
    if not role:
        return False
    allowed = ROLE_PERMISSIONS.get(permission)
    if allowed is None:
        return False
    return normalize_role(role) in allowed


def permissions_for_role(role: str | None) -> set[str]:
    if not role:
        return set()
    normalized = normalize_role(role)
    return {permission for permission, allowed in ROLE_PERMISSIONS.items() if normalized in allowed}


def check_capability(role: str | None, capability: str) -> bool:
    permission = CAPABILITY_PREDICATES.get(capability)
    if permission is None:
        return False
    return has_permission(role, permission)


def capabilities_for_role(role: str | None) -> dict[str, bool]:
    return {name: has_permission(role, permission) for name, permission in CAPABILITY_PREDICATES.items()}


def has_any_role(role: str | None, roles: Iterable[str]) -> bool:
    if not role:
        return False
    normalized = normalize_role(role)
    return any(normalize_role(candidate) == normalized for candidate in roles)


def has_role(role: str | None, roles: str | Iterable[str]) -> bool:
    if isinstance(roles, str):
        roles = [roles]
    return has_any_role(role, roles)


def role_rank(role: str | None) -> int:
    """Position in ROLE_HIERARCHY, or -1 for roles outside it."""
    normalized = normalize_role(role)
    if normalized not in ROLE_HIERARCHY:
        return -1
    return ROLE_HIERARCHY.index(normalized)


def is_at_least_role(role: str | None, minimum: str) -> bool:
    """Unknown candidates rank -1 and fail; an unknown minimum also ranks -1, so any known role passes."""
    candidate_rank = role_rank(role)
    if candidate_rank < 0:
        return False
    return candidate_rank >= role_rank(minimum)


def permission_matrix() -> dict[str, list[str]]:
    return {role: sorted(permissions_for_role(role)) for role in ROLE_HIERARCHY}
