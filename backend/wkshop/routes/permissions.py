from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from wkshop.constants.permissions import RESOURCE_PERMISSIONS, ACTION_READ, ACTION_WRITE, ACTION_DELETE
from wkshop.decorators.auth import require_access, access_gate, permission_service, current_principal
from wkshop.decorators.audit import audit_log
from wkshop.errors import NotFoundError
from wkshop.services.permissions import MODE_MERGE, SAVE_MODES
from wkshop.utils.validation import validate_settings_payload, validate_choice, validate_level, validate_resource

perm_bp = Blueprint('permissions', __name__)


@perm_bp.get('')
@require_access(RESOURCE_PERMISSIONS, ACTION_READ)
def list_permissions():
    return {'success': True, 'data': permission_service().get_all_permissions()}


@perm_bp.put('')
@require_access(RESOURCE_PERMISSIONS, ACTION_WRITE)
@audit_log(
    'PERMISSIONS.SAVE',
    entity='PermissionSetting',
    meta_builder=lambda data, rv, a, kw: {'count': data.get('count'), 'mode': data.get('mode')},
)
def save_permissions():
    data = request.get_json(silent=True) or {}
    settings = validate_settings_payload(data)
    mode = validate_choice(data.get('mode', MODE_MERGE), SAVE_MODES, 'mode')
    permission_service().save_permissions(settings, mode=mode)
    return {'success': True, 'message': 'Permission settings saved', 'count': len(settings), 'mode': mode}


@perm_bp.get('/can-edit-purchase-order-cost')
@jwt_required()
def can_edit_purchase_order_cost():
    principal = current_principal()
    allowed = access_gate().is_cost_input_allowed(principal.id if principal else None)
    return {'success': True, 'data': {'allowed': allowed}}


@perm_bp.get('/<resource>')
@require_access(RESOURCE_PERMISSIONS, ACTION_READ)
def get_resource_permissions(resource: str):
    validate_resource(resource)
    rows = permission_service().get_resource_permissions(resource)
    if not rows:
        raise NotFoundError(f'No permission settings for {resource}')
    return {'success': True, 'data': [r.to_dict() for r in rows]}


@perm_bp.delete('/<resource>')
@require_access(RESOURCE_PERMISSIONS, ACTION_DELETE)
@audit_log('PERMISSIONS.DELETE', entity='PermissionSetting', entity_id_arg='resource')
def delete_resource_permissions(resource: str):
    validate_resource(resource)
    if not permission_service().delete_resource(resource):
        raise NotFoundError(f'No permission settings for {resource}')
    return {'success': True, 'resource': resource}


@perm_bp.delete('/<resource>/<level>')
@require_access(RESOURCE_PERMISSIONS, ACTION_DELETE)
@audit_log('PERMISSIONS.DELETE', entity='PermissionSetting', entity_id_arg='resource', meta_keys=['level'])
def delete_permission(resource: str, level: str):
    validate_resource(resource)
    validate_level(level)
    if not permission_service().delete_permission(resource, level):
        raise NotFoundError(f'No permission setting for {resource} / {level}')
    return {'success': True, 'resource': resource, 'level': level}
