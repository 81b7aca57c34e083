from flask_jwt_extended import decode_token
from wkshop import get_db
from wkshop.models.account import AdminAccount
from tests.test_utils_seed import ensure_account


def test_login_and_me(app_context, client):
    ensure_account('kim', 'S: Admin', password='secret')
    resp = client.post('/api/auth/login', json={'id': 'kim', 'password': 'secret'})
    assert resp.status_code == 200, resp.get_json()
    body = resp.get_json()
    assert 'password_hash' not in body['account']
    assert body['account']['level'] == 'S: Admin'
    assert body['account']['last_login_at'] is not None
    claims = decode_token(body['access_token'])
    assert claims['sub'] == 'kim'
    assert claims['level'] == 'S: Admin'
    me = client.get('/api/auth/me', headers={'Authorization': f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.get_json()['id'] == 'kim'
    assert me.get_json()['level'] == 'S: Admin'
    assert me.get_json()['can_edit_cost'] is False


def test_me_reports_cost_permission(app_context, client):
    ensure_account('venpus', 'D0: 비전 담당자', password='pw')
    token = client.post('/api/auth/login', json={'id': 'venpus', 'password': 'pw'}).get_json()['access_token']
    me = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
    assert me.get_json()['can_edit_cost'] is True


def test_login_rejects_bad_credentials(app_context, client):
    ensure_account('kim', 'S: Admin', password='secret')
    assert client.post('/api/auth/login', json={'id': 'kim', 'password': 'wrong'}).status_code == 401
    assert client.post('/api/auth/login', json={'id': 'nobody', 'password': 'secret'}).status_code == 401
    resp = client.post('/api/auth/login', json={'id': 'kim'})
    assert resp.status_code == 400
    assert resp.get_json()['error']['detail'] == 'id & password required'
    for body in (['x'], 'kim', 42):
        resp = client.post('/api/auth/login', json=body)
        assert resp.status_code == 400, body
        assert resp.get_json()['error']['status'] == 400


def test_inactive_account_cannot_login(app_context, client):
    ensure_account('old', 'C0: 한국Admin', password='pw', is_active=False)
    resp = client.post('/api/auth/login', json={'id': 'old', 'password': 'pw'})
    assert resp.status_code == 401
    assert get_db().get(AdminAccount, 'old').last_login_at is None


def test_me_requires_token(client):
    assert client.get('/api/auth/me').status_code == 401
