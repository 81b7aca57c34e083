"""Persistence adapter for permission_settings rows.

Writes go through a dialect-native upsert keyed on the (resource, level)
unique constraint, so two administrators saving the same cell at once are
linearized by the database: the row ends up holding one writer's three flags,
never a mix.
"""
from __future__ import annotations
import logging
from contextlib import contextmanager
from typing import Callable, List, Optional, Sequence

from sqlalchemy import select, delete, func
from sqlalchemy.exc import SQLAlchemyError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from wkshop.errors import InfrastructureError, TransientStorageError
from wkshop.models.permission import PermissionSetting

logger = logging.getLogger(__name__)

_TABLE = PermissionSetting.__table__


@contextmanager
def storage_errors(operation: str):
    """Translate SQLAlchemy failures into the domain taxonomy, logging context."""
    try:
        yield
    except PoolTimeoutError as e:
        logger.warning('permission store %s: connection pool exhausted', operation)
        raise TransientStorageError('Storage temporarily unavailable') from e
    except SQLAlchemyError as e:
        logger.error('permission store %s failed: %s', operation, e, exc_info=True)
        raise InfrastructureError('Permission storage failure') from e


def _flag_values(setting) -> dict:
    return {
        'resource': setting['resource'],
        'level': setting['level'],
        'can_read': bool(setting['can_read']),
        'can_write': bool(setting['can_write']),
        'can_delete': bool(setting['can_delete']),
    }


class PermissionStore:
    """CRUD over permission_settings using a session factory (e.g. a scoped_session)."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def _session(self) -> Session:
        return self._session_factory()

    # --- reads ---

    def find_all(self) -> List[PermissionSetting]:
        session = self._session()
        with storage_errors('find_all'):
            stmt = (
                select(PermissionSetting)
                .order_by(PermissionSetting.resource, PermissionSetting.level)
                .execution_options(populate_existing=True)
            )
            return list(session.execute(stmt).scalars())

    def find_by_resource(self, resource: str) -> List[PermissionSetting]:
        session = self._session()
        with storage_errors('find_by_resource'):
            stmt = (
                select(PermissionSetting)
                .where(PermissionSetting.resource == resource)
                .order_by(PermissionSetting.level)
                .execution_options(populate_existing=True)
            )
            return list(session.execute(stmt).scalars())

    def find_by_resource_and_level(self, resource: str, level: str) -> Optional[PermissionSetting]:
        session = self._session()
        with storage_errors('find_by_resource_and_level'):
            stmt = (
                select(PermissionSetting)
                .where(PermissionSetting.resource == resource, PermissionSetting.level == level)
                .execution_options(populate_existing=True)
            )
            return session.execute(stmt).scalar_one_or_none()

    # --- writes ---

    def _upsert_statement(self, session: Session, values: dict):
        dialect = session.get_bind().dialect.name
        if dialect == 'mysql':
            from sqlalchemy.dialects.mysql import insert as mysql_insert
            stmt = mysql_insert(_TABLE).values(**values)
            return stmt.on_duplicate_key_update(
                can_read=stmt.inserted.can_read,
                can_write=stmt.inserted.can_write,
                can_delete=stmt.inserted.can_delete,
                updated_at=func.current_timestamp(),
            )
        if dialect == 'postgresql':
            from sqlalchemy.dialects.postgresql import insert as pg_insert
            stmt = pg_insert(_TABLE).values(**values)
        elif dialect == 'sqlite':
            from sqlalchemy.dialects.sqlite import insert as sqlite_insert
            stmt = sqlite_insert(_TABLE).values(**values)
        else:
            raise InfrastructureError(f'Upsert not supported for dialect {dialect}')
        return stmt.on_conflict_do_update(
            index_elements=['resource', 'level'],
            set_={
                'can_read': stmt.excluded.can_read,
                'can_write': stmt.excluded.can_write,
                'can_delete': stmt.excluded.can_delete,
                'updated_at': func.current_timestamp(),
            },
        )

    def upsert(self, setting) -> PermissionSetting:
        """Insert or update one (resource, level) row; return the persisted row."""
        session = self._session()
        values = _flag_values(setting)
        with storage_errors('upsert'):
            try:
                session.execute(self._upsert_statement(session, values))
                session.commit()
            except Exception:
                session.rollback()
                raise
        row = self.find_by_resource_and_level(values['resource'], values['level'])
        if row is None:
            raise InfrastructureError('Permission row missing after save')
        return row

    def upsert_many(self, settings: Sequence, prune_others: bool = False) -> None:
        """Upsert every setting in one transaction.

        prune_others=True also deletes rows whose (resource, level) is not in
        the batch, making the table equal to the batch.
        """
        if not settings and not prune_others:
            return
        session = self._session()
        rows = [_flag_values(s) for s in settings]
        with storage_errors('upsert_many'):
            try:
                if prune_others:
                    keep = {(r['resource'], r['level']) for r in rows}
                    existing = session.execute(
                        select(PermissionSetting.id, PermissionSetting.resource, PermissionSetting.level)
                    ).all()
                    stale_ids = [pid for pid, res, lvl in existing if (res, lvl) not in keep]
                    if stale_ids:
                        session.execute(delete(PermissionSetting).where(PermissionSetting.id.in_(stale_ids)))
                for values in rows:
                    session.execute(self._upsert_statement(session, values))
                session.commit()
            except Exception:
                session.rollback()
                raise

    def delete_by_resource(self, resource: str) -> bool:
        return self._delete(PermissionSetting.resource == resource)

    def delete_by_resource_and_level(self, resource: str, level: str) -> bool:
        return self._delete(PermissionSetting.resource == resource, PermissionSetting.level == level)

    def _delete(self, *criteria) -> bool:
        session = self._session()
        with storage_errors('delete'):
            try:
                result = session.execute(delete(PermissionSetting).where(*criteria))
                session.commit()
            except Exception:
                session.rollback()
                raise
        return (result.rowcount or 0) > 0
