"""Grouped (resource -> level -> flags) view of permission_settings rows.

The matrix is a pure fold over rows. A (resource, level) pair that never
appears is read as all-false; no zero rows are materialized.
"""
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, Iterator, List, Mapping

from wkshop.constants.permissions import ACTION_FLAGS, FLAG_NAMES
from wkshop.errors import ValidationError

Flags = Dict[str, bool]


def no_permissions() -> Flags:
    return {name: False for name in FLAG_NAMES}


@dataclass(frozen=True)
class PermissionSettingDTO:
    resource: str
    level: str
    can_read: bool
    can_write: bool
    can_delete: bool

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'PermissionSettingDTO':
        return cls(
            resource=data['resource'],
            level=data['level'],
            can_read=data['can_read'],
            can_write=data['can_write'],
            can_delete=data['can_delete'],
        )

    def flags(self) -> Flags:
        return {'can_read': self.can_read, 'can_write': self.can_write, 'can_delete': self.can_delete}

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _row_parts(row):
    if isinstance(row, Mapping):
        return row['resource'], row['level'], {name: bool(row[name]) for name in FLAG_NAMES}
    return row.resource, row.level, {name: bool(getattr(row, name)) for name in FLAG_NAMES}


def group_permissions(rows: Iterable) -> List[Dict[str, Any]]:
    """Fold flat rows (ORM objects, DTOs or dicts) into ResourcePermissions entries.

    Resources keep first-seen order and levels keep insertion order within a
    resource; a later row for the same pair replaces the earlier one.
    """
    grouped: Dict[str, Dict[str, Flags]] = {}
    for row in rows:
        resource, level, flags = _row_parts(row)
        grouped.setdefault(resource, {})[level] = flags
    return [{'resource': res, 'permissions': levels} for res, levels in grouped.items()]


def flatten(grouped: Iterable[Mapping[str, Any]]) -> Iterator[PermissionSettingDTO]:
    """Inverse of group_permissions: one DTO per stored cell."""
    for entry in grouped:
        for level, flags in entry['permissions'].items():
            yield PermissionSettingDTO(
                resource=entry['resource'],
                level=level,
                can_read=flags['can_read'],
                can_write=flags['can_write'],
                can_delete=flags['can_delete'],
            )


class AuthorizationMatrix:
    """Immutable snapshot consulted at decision time."""

    def __init__(self, grouped: Dict[str, Dict[str, Flags]]):
        self._grouped = grouped

    @classmethod
    def from_rows(cls, rows: Iterable) -> 'AuthorizationMatrix':
        grouped: Dict[str, Dict[str, Flags]] = {}
        for entry in group_permissions(rows):
            grouped[entry['resource']] = entry['permissions']
        return cls(grouped)

    @classmethod
    def empty(cls) -> 'AuthorizationMatrix':
        return cls({})

    def lookup(self, resource: str, level: str) -> Flags:
        flags = self._grouped.get(resource, {}).get(level)
        return dict(flags) if flags else no_permissions()

    def has(self, resource: str, level: str) -> bool:
        return level in self._grouped.get(resource, {})

    def allows(self, level: str, resource: str, action: str) -> bool:
        flag = ACTION_FLAGS.get(action)
        if flag is None:
            raise ValidationError(f'Unknown action: {action}')
        return self.lookup(resource, level)[flag]

    def resources(self) -> List[str]:
        return list(self._grouped)

    def to_list(self) -> List[Dict[str, Any]]:
        return [
            {'resource': res, 'permissions': {lvl: dict(f) for lvl, f in levels.items()}}
            for res, levels in self._grouped.items()
        ]

    def __len__(self):
        return sum(len(levels) for levels in self._grouped.values())
