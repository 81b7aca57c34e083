"""Permission matrix service: load, persist and decide.

Decisions read a cached AuthorizationMatrix snapshot. Every mutation drops
the snapshot before returning (also when the mutation fails), so a decision
made after a save always sees that save.
"""
from __future__ import annotations
import logging
import threading
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from wkshop.models.permission import PermissionSetting
from wkshop.repositories.permissions import PermissionStore
from wkshop.services.matrix import AuthorizationMatrix, PermissionSettingDTO, group_permissions
from wkshop.errors import ValidationError

logger = logging.getLogger(__name__)

MODE_MERGE = 'merge'
MODE_REPLACE = 'replace'
SAVE_MODES = (MODE_MERGE, MODE_REPLACE)

SettingInput = Union[PermissionSettingDTO, Mapping[str, Any]]


def _as_dto(setting: SettingInput) -> PermissionSettingDTO:
    if isinstance(setting, PermissionSettingDTO):
        return setting
    return PermissionSettingDTO.from_mapping(setting)


class PermissionService:
    def __init__(self, store: PermissionStore, cache_ttl: float = 30.0, clock=time.monotonic):
        self._store = store
        self._cache_ttl = cache_ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: Optional[AuthorizationMatrix] = None
        self._loaded_at = 0.0
        self._generation = 0

    # --- queries ---

    def get_all_permissions(self) -> List[Dict[str, Any]]:
        """All rows grouped per resource. Always read fresh from storage."""
        return group_permissions(self._store.find_all())

    def get_resource_permissions(self, resource: str) -> List[PermissionSetting]:
        return self._store.find_by_resource(resource)

    def snapshot(self) -> AuthorizationMatrix:
        """Cached matrix, reloaded when older than the TTL.

        The load runs outside the lock. A load that overlaps an invalidate()
        is returned to its caller but never cached.
        """
        with self._lock:
            if self._snapshot is not None and self._cache_ttl > 0:
                if self._clock() - self._loaded_at < self._cache_ttl:
                    return self._snapshot
            generation = self._generation
        matrix = AuthorizationMatrix.from_rows(self._store.find_all())
        with self._lock:
            if generation == self._generation:
                self._snapshot = matrix
                self._loaded_at = self._clock()
        logger.debug('permission matrix loaded (%d cells)', len(matrix))
        return matrix

    def can(self, level: str, resource: str, action: str) -> bool:
        return self.snapshot().allows(level, resource, action)

    def is_configured(self, level: str, resource: str) -> bool:
        """True when a stored row exists for the pair, whatever its flags."""
        return self.snapshot().has(resource, level)

    def invalidate(self) -> None:
        with self._lock:
            self._generation += 1
            self._snapshot = None

    # --- mutations ---

    def save_permissions(self, settings: Sequence[SettingInput], mode: str = MODE_MERGE) -> None:
        """Upsert a batch atomically.

        merge: rows not named in the batch are left untouched.
        replace: rows not named in the batch are deleted.
        """
        if mode not in SAVE_MODES:
            raise ValidationError(f'mode must be one of {list(SAVE_MODES)}')
        dtos = [_as_dto(s) for s in settings]
        try:
            self._store.upsert_many([d.to_dict() for d in dtos], prune_others=(mode == MODE_REPLACE))
        finally:
            self.invalidate()
        logger.info('saved %d permission settings (mode=%s)', len(dtos), mode)

    def save_permission(self, setting: SettingInput) -> PermissionSetting:
        dto = _as_dto(setting)
        try:
            row = self._store.upsert(dto.to_dict())
        finally:
            self.invalidate()
        logger.info('saved permission %s/%s', dto.resource, dto.level)
        return row

    def delete_resource(self, resource: str) -> bool:
        try:
            deleted = self._store.delete_by_resource(resource)
        finally:
            self.invalidate()
        if deleted:
            logger.info('deleted permissions for resource %s', resource)
        return deleted

    def delete_permission(self, resource: str, level: str) -> bool:
        try:
            deleted = self._store.delete_by_resource_and_level(resource, level)
        finally:
            self.invalidate()
        if deleted:
            logger.info('deleted permission %s/%s', resource, level)
        return deleted
