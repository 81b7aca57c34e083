import pytest
from wkshop.services.matrix import AuthorizationMatrix, PermissionSettingDTO, group_permissions, flatten, no_permissions
from wkshop.errors import ValidationError


ROWS = [
    {'resource': 'materials', 'level': 'C0: 한국Admin', 'can_read': True, 'can_write': False, 'can_delete': False},
    {'resource': 'purchase_orders', 'level': 'A-SuperAdmin', 'can_read': True, 'can_write': True, 'can_delete': True},
    {'resource': 'materials', 'level': 'A-SuperAdmin', 'can_read': True, 'can_write': True, 'can_delete': False},
]


def test_group_keeps_first_seen_resource_and_insertion_level_order():
    grouped = group_permissions(ROWS)
    assert [g['resource'] for g in grouped] == ['materials', 'purchase_orders']
    assert list(grouped[0]['permissions']) == ['C0: 한국Admin', 'A-SuperAdmin']
    assert grouped[0]['permissions']['A-SuperAdmin'] == {'can_read': True, 'can_write': True, 'can_delete': False}


def test_group_later_row_wins_for_same_pair():
    rows = ROWS + [{'resource': 'materials', 'level': 'A-SuperAdmin', 'can_read': False, 'can_write': False, 'can_delete': False}]
    grouped = group_permissions(rows)
    assert grouped[0]['permissions']['A-SuperAdmin'] == no_permissions()


def test_group_accepts_dtos_and_empty_input():
    assert group_permissions([]) == []
    dto = PermissionSettingDTO('gallery', 'D0: 비전 담당자', True, False, False)
    assert group_permissions([dto]) == [{'resource': 'gallery', 'permissions': {'D0: 비전 담당자': dto.flags()}}]


def test_flatten_reverses_grouping():
    cells = {(d.resource, d.level): d.flags() for d in flatten(group_permissions(ROWS))}
    assert cells == {(r['resource'], r['level']): {k: r[k] for k in ('can_read', 'can_write', 'can_delete')} for r in ROWS}


def test_missing_pair_reads_as_no_permissions():
    m = AuthorizationMatrix.from_rows(ROWS)
    assert m.lookup('materials', 'D0: 비전 담당자') == no_permissions()
    assert m.lookup('unknown_resource', 'A-SuperAdmin') == no_permissions()
    assert 'unknown_resource' not in m.resources()
    assert m.allows('D0: 비전 담당자', 'unknown_resource', 'write') is False


def test_allows_maps_actions_to_flags():
    m = AuthorizationMatrix.from_rows(ROWS)
    assert m.allows('A-SuperAdmin', 'materials', 'read') is True
    assert m.allows('A-SuperAdmin', 'materials', 'write') is True
    assert m.allows('A-SuperAdmin', 'materials', 'delete') is False
    assert m.allows('C0: 한국Admin', 'materials', 'write') is False
    assert len(m) == 3


def test_lookup_returns_copy():
    m = AuthorizationMatrix.from_rows(ROWS)
    m.lookup('materials', 'A-SuperAdmin')['can_delete'] = True
    assert m.allows('A-SuperAdmin', 'materials', 'delete') is False


def test_unknown_action_rejected():
    with pytest.raises(ValidationError):
        AuthorizationMatrix.empty().allows('A-SuperAdmin', 'materials', 'approve')
