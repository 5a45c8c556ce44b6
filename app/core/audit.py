"""Audit trail writes. Best effort: a failed insert never undoes the audited action."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging

from supabase import Client

from app.core.permissions import CallerContext

logger = logging.getLogger(__name__)


def log_audit(
    supabase: Client,
    caller: CallerContext,
    action: str,
    entity_type: str,
    entity_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    organization_id: Optional[str] = None,
) -> bool:
    try:
        supabase.table("audit_logs").insert({
            "organization_id": organization_id or caller.organization_id,
            "user_id": caller.user_id,
            "user_name": caller.profile.full_name or caller.identity.email,
            "action": action,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "metadata": metadata or {},
            "created_at": datetime.now(timezone.utc).isoformat(),
        }).execute()
        return True
    except Exception as e:
        logger.warning(f"Audit log insert failed for {action} on {entity_type}/{entity_id}: {e}")
        return False
