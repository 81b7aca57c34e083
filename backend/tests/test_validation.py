import pytest
from wkshop.config.pagination import normalize_pagination
from wkshop.constants.permissions import ADMIN_LEVELS, KNOWN_RESOURCES, build_default_settings, LEVEL_SUPER_ADMIN
from wkshop.errors import ValidationError
from wkshop.utils.validation import validate_settings_payload, validate_resource, validate_level, coerce_number


def _item(**over):
    item = {'resource': 'materials', 'level': 'S: Admin', 'can_read': True, 'can_write': False, 'can_delete': False}
    item.update(over)
    return item


def test_settings_payload_returns_dtos():
    dtos = validate_settings_payload({'settings': [_item(), _item(level='A-SuperAdmin', can_delete=True)]})
    assert [(d.resource, d.level) for d in dtos] == [('materials', 'S: Admin'), ('materials', 'A-SuperAdmin')]
    assert dtos[1].can_delete is True


def test_empty_settings_list_is_allowed():
    assert validate_settings_payload({'settings': []}) == []


@pytest.mark.parametrize('item', [
    'materials',
    _item(resource=''),
    _item(resource='   '),
    _item(level=None),
    _item(level='s: admin'),
    _item(can_write='true'),
    _item(can_delete=0),
])
def test_bad_setting_rejected(item):
    with pytest.raises(ValidationError):
        validate_settings_payload({'settings': [item]})


def test_missing_flag_rejected():
    item = _item()
    del item['can_delete']
    with pytest.raises(ValidationError):
        validate_settings_payload({'settings': [item]})


def test_duplicate_pair_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_settings_payload({'settings': [_item(), _item(can_read=False)]})
    assert 'duplicate' in exc.value.detail


def test_resource_length_limit():
    assert validate_resource('x' * 64) == 'x' * 64
    with pytest.raises(ValidationError):
        validate_resource('x' * 65)


def test_levels_are_closed_set():
    for level in ADMIN_LEVELS:
        assert validate_level(level) == level
    with pytest.raises(ValidationError):
        validate_level('E: Guest')


def test_coerce_number():
    assert coerce_number(None, 'unit_price') is None
    assert coerce_number('2.5', 'unit_price') == 2.5
    assert coerce_number(3, 'quantity', minimum=1) == 3
    for bad in (True, 'abc', -0.5, [1], 'inf', '-inf', 'nan', 'NaN', float('inf'), 10 ** 400):
        with pytest.raises(ValidationError):
            coerce_number(bad, 'unit_price')


def test_pagination_clamps():
    assert normalize_pagination(None, None) == (50, 0)
    assert normalize_pagination('1000', '-5') == (200, 0)
    assert normalize_pagination('0', '3') == (1, 3)
    with pytest.raises(ValidationError):
        normalize_pagination('ten', None)


def test_default_settings_cover_every_cell_once():
    settings = build_default_settings()
    keys = [(s['resource'], s['level']) for s in settings]
    assert len(keys) == len(set(keys)) == len(KNOWN_RESOURCES) * len(ADMIN_LEVELS)
    super_admin = [s for s in settings if s['level'] == LEVEL_SUPER_ADMIN]
    assert all(s['can_read'] and s['can_write'] and s['can_delete'] for s in super_admin)
    validate_settings_payload({'settings': settings})
