from __future__ import annotations

from typing import Any

from sitefunds.db import supabase
from sitefunds.observability import _normalize, incr_metric, log_event


def record_audit(
    *,
    tenant_id: str | None,
    user_id: str | None,
    action: str,
    entity_type: str,
    entity_id: str,
    project_id: str | None = None,
    amount: Any = None,
    details: dict[str, Any] | None = None,
) -> dict:
    row = {
        "tenant_id": tenant_id,
        "user_id": user_id,
        "action": action,
        "entity_type": entity_type,
        "entity_id": entity_id,
        "project_id": project_id,
        "amount": None if amount is None else str(amount),
        "details": _normalize(details or {}),
    }
    result = supabase.table("audit_logs").insert(row).execute()
    incr_metric("audit_recorded", action=action)
    log_event("audit_recorded", action=action, entity_type=entity_type, entity_id=entity_id, tenant_id=tenant_id)
    return result.data[0] if result.data else row
