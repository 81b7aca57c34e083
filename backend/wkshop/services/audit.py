from __future__ import annotations
from typing import Any, Dict, Optional
from flask_jwt_extended import get_jwt_identity, get_jwt
from wkshop import get_db
from wkshop.models.audit import AuditLog


def add_audit(action: str, entity: Optional[str] = None, entity_id: Optional[str] = None, meta: Optional[Dict[str, Any]] = None):
    """Persist an audit log entry within the current DB session.

    Parameters:
      action: short action code e.g. PERMISSIONS.SAVE, PO.UPDATE
      entity: optional entity name (PermissionSetting, PurchaseOrder)
      entity_id: optional primary key string
      meta: additional JSON-safe dictionary (will be shallow copied)
    """
    session = get_db()
    # Called from routes guarded by require_access, so a verified JWT is present
    actor = get_jwt_identity()
    level = (get_jwt() or {}).get('level')
    log = AuditLog(
        actor_id=str(actor) if actor is not None else None,
        actor_level=level,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        meta=dict(meta or {}),
    )
    session.add(log)
    # No commit here; caller's transaction boundary controls durability.
    return log
