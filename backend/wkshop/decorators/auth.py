from functools import wraps
from typing import Optional
from flask import current_app
from flask_jwt_extended import verify_jwt_in_request, get_jwt, get_jwt_identity
from wkshop.services.access import AccessGate, Principal
from wkshop.services.permissions import PermissionService


def access_gate() -> AccessGate:
    return current_app.extensions['wkshop']['access_gate']


def permission_service() -> PermissionService:
    return current_app.extensions['wkshop']['permission_service']


def current_principal() -> Optional[Principal]:
    """Principal from the verified JWT (identity = account id, 'level' claim)."""
    identity = get_jwt_identity()
    if identity is None:
        return None
    return Principal(id=str(identity), level=get_jwt().get('level'))


def require_access(resource: str, action: str):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            access_gate().require(current_principal(), resource, action)
            return fn(*args, **kwargs)
        return wrapper
    return outer
