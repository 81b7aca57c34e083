import threading
import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import sessionmaker, scoped_session
from wkshop import get_db
from wkshop.errors import InfrastructureError, TransientStorageError
from wkshop.models.permission import Base, PermissionSetting
from wkshop.repositories.permissions import PermissionStore


def _cell(resource='materials', level='A-SuperAdmin', r=True, w=True, d=False):
    return {'resource': resource, 'level': level, 'can_read': r, 'can_write': w, 'can_delete': d}


def _count(resource=None):
    q = select(func.count()).select_from(PermissionSetting)
    if resource:
        q = q.where(PermissionSetting.resource==resource)
    return get_db().execute(q).scalar_one()


@pytest.fixture()
def store(app_context):
    return PermissionStore(get_db)


def test_upsert_returns_persisted_row_with_timestamps(store):
    row = store.upsert(_cell())
    assert row.id is not None
    assert row.flags() == {'can_read': True, 'can_write': True, 'can_delete': False}
    assert row.created_at is not None and row.updated_at is not None


def test_upsert_twice_keeps_single_row_and_flags(store):
    first = store.upsert(_cell())
    second = store.upsert(_cell())
    assert first.id == second.id
    assert second.flags() == {'can_read': True, 'can_write': True, 'can_delete': False}
    assert _count('materials') == 1


def test_upsert_updates_flags_in_place(store):
    store.upsert(_cell())
    row = store.upsert(_cell(r=False, w=False, d=True))
    assert row.flags() == {'can_read': False, 'can_write': False, 'can_delete': True}
    assert _count() == 1


def test_upsert_many_is_unique_per_pair(store):
    store.upsert_many([_cell(), _cell(level='S: Admin', w=False)])
    store.upsert_many([_cell(d=True), _cell(resource='gallery')])
    assert _count() == 3
    assert store.find_by_resource_and_level('materials', 'A-SuperAdmin').can_delete is True
    assert store.find_by_resource_and_level('materials', 'S: Admin').can_write is False


def test_upsert_many_empty_is_noop(store):
    store.upsert(_cell())
    store.upsert_many([])
    assert _count() == 1


def test_upsert_many_prune_removes_unlisted_rows(store):
    store.upsert_many([_cell(), _cell(resource='gallery'), _cell(level='S: Admin')])
    store.upsert_many([_cell(resource='gallery', w=False)], prune_others=True)
    rows = store.find_all()
    assert [(r.resource, r.level) for r in rows] == [('gallery', 'A-SuperAdmin')]
    assert rows[0].can_write is False


def test_find_by_resource_orders_by_level(store):
    store.upsert_many([_cell(level='S: Admin'), _cell(level='A-SuperAdmin'), _cell(resource='gallery')])
    assert [r.level for r in store.find_by_resource('materials')] == ['A-SuperAdmin', 'S: Admin']
    assert store.find_by_resource('nothing') == []
    assert store.find_by_resource_and_level('materials', 'D0: 비전 담당자') is None


def test_delete_by_resource_and_level(store):
    store.upsert_many([_cell(), _cell(level='S: Admin'), _cell(resource='gallery')])
    assert store.delete_by_resource_and_level('materials', 'S: Admin') is True
    assert store.delete_by_resource_and_level('materials', 'S: Admin') is False
    assert store.delete_by_resource('materials') is True
    assert store.delete_by_resource('materials') is False
    assert _count() == 1


class _BoomSession:
    def __init__(self, exc):
        self.exc = exc
        self.rolled_back = False

    def execute(self, *a, **k):
        raise self.exc

    def rollback(self):
        self.rolled_back = True

    def get_bind(self):
        return get_db().get_bind()


def test_query_failure_becomes_infrastructure_error(app_context):
    boom = _BoomSession(OperationalError('SELECT', {}, Exception('db down')))
    store = PermissionStore(lambda: boom)
    with pytest.raises(InfrastructureError):
        store.find_all()
    with pytest.raises(InfrastructureError):
        store.upsert_many([_cell()])
    assert boom.rolled_back


def test_pool_exhaustion_becomes_transient_error(app_context):
    store = PermissionStore(lambda: _BoomSession(PoolTimeoutError('QueuePool limit reached')))
    with pytest.raises(TransientStorageError):
        store.upsert(_cell())


def test_concurrent_saves_to_same_cell_never_tear(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={'check_same_thread': False, 'timeout': 30},
    )
    Base.metadata.create_all(engine)
    sessions = scoped_session(sessionmaker(bind=engine, expire_on_commit=False, autoflush=False))
    store = PermissionStore(sessions)
    writes = {
        'a': _cell(r=True, w=False, d=True),
        'b': _cell(r=False, w=True, d=False),
    }
    errors = []

    def writer(key):
        try:
            for _ in range(20):
                store.upsert(writes[key])
        except Exception as e:  # surfaced below
            errors.append(e)
        finally:
            sessions.remove()

    threads = [threading.Thread(target=writer, args=(k,)) for k in writes]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert not errors
    rows = store.find_all()
    assert len(rows) == 1
    final = {k: rows[0].flags()[k] for k in ('can_read', 'can_write', 'can_delete')}
    assert final in [{k: v for k, v in w.items() if k.startswith('can_')} for w in writes.values()]
    sessions.remove()
    engine.dispose()
