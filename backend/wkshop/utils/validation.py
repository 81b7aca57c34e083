"""Boundary checks for request payloads.

Raise ValidationError (400) with a short message; services assume their
input already passed through here.
"""
from __future__ import annotations
import math
from typing import Any, Iterable, List, Mapping

from wkshop.constants.permissions import ADMIN_LEVELS, FLAG_NAMES, MAX_RESOURCE_LENGTH
from wkshop.errors import ValidationError
from wkshop.services.matrix import PermissionSettingDTO


def validate_choice(value: Any, allowed: Iterable[str], field_name: str) -> str:
    """Return value if it is one of allowed, else raise."""
    if value not in tuple(allowed):
        raise ValidationError(f"{field_name} invalid")
    return value


def validate_level(level: Any) -> str:
    return validate_choice(level, ADMIN_LEVELS, 'level')


def validate_resource(resource: Any) -> str:
    if not isinstance(resource, str) or not resource.strip():
        raise ValidationError('resource required')
    if len(resource) > MAX_RESOURCE_LENGTH:
        raise ValidationError(f'resource longer than {MAX_RESOURCE_LENGTH} characters')
    return resource


def validate_setting(item: Any) -> PermissionSettingDTO:
    if not isinstance(item, Mapping):
        raise ValidationError('each setting must be an object')
    if not item.get('resource') or not item.get('level'):
        raise ValidationError('each setting requires resource and level')
    validate_resource(item['resource'])
    validate_level(item['level'])
    # strictly bool: 0/1 or "true" are rejected
    if any(not isinstance(item.get(name), bool) for name in FLAG_NAMES):
        raise ValidationError('can_read, can_write, can_delete must be boolean')
    return PermissionSettingDTO.from_mapping(item)


def validate_settings_payload(data: Any) -> List[PermissionSettingDTO]:
    """Validate a {settings: [...]} body and reject duplicate (resource, level) pairs."""
    if not isinstance(data, Mapping) or not isinstance(data.get('settings'), list):
        raise ValidationError('settings array required')
    dtos = [validate_setting(item) for item in data['settings']]
    seen = set()
    for dto in dtos:
        key = (dto.resource, dto.level)
        if key in seen:
            raise ValidationError(f'duplicate setting for {dto.resource} / {dto.level}')
        seen.add(key)
    return dtos


def coerce_number(value: Any, field_name: str, minimum: float = 0):
    """Accept int/float/numeric strings; reject bools, non-finite values and values below minimum."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f'{field_name} must be a number')
    try:
        number = float(value) if not isinstance(value, int) else value
        finite = math.isfinite(number)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f'{field_name} must be a number')
    if not finite:
        raise ValidationError(f'{field_name} must be a finite number')
    if number < minimum:
        raise ValidationError(f'{field_name} must be >= {minimum}')
    return number


__all__ = [
    'validate_choice', 'validate_level', 'validate_resource', 'validate_setting',
    'validate_settings_payload', 'coerce_number',
]
