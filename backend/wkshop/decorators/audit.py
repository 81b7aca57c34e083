"""Audit logging decorator for mutating route handlers.

Usage examples:

@audit_log('PO.CREATE', entity='PurchaseOrder', entity_id_key='id', meta_keys=['po_number'])
def create_purchase_order():
    ... return _po_json(po), 201

@audit_log('PERMISSIONS.SAVE', entity='PermissionSetting',
           meta_builder=lambda data, rv, args, kwargs: {'count': data.get('count')})
def save_permissions(): ...

Parameters:
  action: required audit action code
  entity: optional entity label
  entity_id_key: key in the returned JSON object whose value becomes entity_id.
  entity_id_arg: name of the path parameter used for entity_id when entity_id_key is absent.
  meta_keys: keys projected from the returned JSON into meta.
  meta_builder: callable returning meta; receives (data, original_return_value, args, kwargs). Overrides meta_keys.
  diff_keys / pre_fetch: pre_fetch(args, kwargs) returns a snapshot taken before the handler runs;
    changed diff_keys are recorded under meta['changes'].

Only successful responses (status < 400) are audited; handlers that raise are not.
"""
from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, Dict, Iterable, Optional

from wkshop.services.audit import add_audit
from wkshop import get_db

logger = logging.getLogger(__name__)


def _extract_payload(rv: Any):
    """Return (data, status) from a Flask view return value."""
    if isinstance(rv, tuple) and rv:
        status = rv[1] if len(rv) > 1 and isinstance(rv[1], int) else 200
        return rv[0], status
    return rv, 200


def audit_log(
    action: str,
    *,
    entity: Optional[str] = None,
    entity_id_key: Optional[str] = None,
    entity_id_arg: Optional[str] = None,
    meta_keys: Optional[Iterable[str]] = None,
    meta_builder: Optional[Callable[[dict, Any, tuple, dict], dict]] = None,
    diff_keys: Optional[Iterable[str]] = None,
    pre_fetch: Optional[Callable[[tuple, dict], Dict[str, Any]]] = None,
):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            before_snapshot = pre_fetch(args, kwargs) if (diff_keys and pre_fetch) else None
            rv = fn(*args, **kwargs)
            data, status = _extract_payload(rv)
            if status >= 400:
                return rv
            if not isinstance(data, dict):
                data = {}
            entity_id = None
            if entity_id_key and entity_id_key in data:
                entity_id = data.get(entity_id_key)
            elif entity_id_arg and entity_id_arg in kwargs:
                entity_id = kwargs.get(entity_id_arg)
            if meta_builder:
                meta = meta_builder(data, rv, args, kwargs) or {}
            else:
                meta = {k: data.get(k) for k in (meta_keys or []) if k in data}
            if diff_keys and before_snapshot:
                changes = {
                    k: {'before': before_snapshot.get(k), 'after': data.get(k)}
                    for k in diff_keys
                    if k in before_snapshot and k in data and before_snapshot.get(k) != data.get(k)
                }
                if changes:
                    meta['changes'] = changes
            session = get_db()
            add_audit(action, entity, entity_id, meta)
            try:
                session.commit()
            except Exception:
                # the main change is already committed; keep the response
                session.rollback()
                logger.warning('audit write failed for %s', action, exc_info=True)
            return rv
        return wrapper
    return outer
