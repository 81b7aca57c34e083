from tests.test_utils_seed import super_admin_headers


def test_unknown_path_returns_error_json(client):
    resp = client.get('/non-existent-path')
    # Flask default 404 should be wrapped by error handler
    assert resp.status_code == 404
    body = resp.get_json()
    assert body['error']['status'] == 404
    assert 'detail' in body['error']


def test_health(client):
    assert client.get('/healthz').get_json() == {'status': 'ok'}


def test_internal_error_shape(app_context, client, monkeypatch):
    headers = super_admin_headers()
    # Break the listing only after the token exists
    import wkshop.routes.permissions as perm_mod

    class BoomService:
        def get_all_permissions(self):
            raise RuntimeError('explode')
    monkeypatch.setattr(perm_mod, 'permission_service', lambda: BoomService())
    resp = client.get('/api/permissions', headers=headers)
    assert resp.status_code == 500
    body = resp.get_json()
    assert body['error'] == {'status': 500, 'title': 'Internal Server Error', 'detail': 'Unexpected error'}
    assert 'explode' not in resp.get_data(as_text=True)


def test_method_not_allowed_shape(client):
    resp = client.post('/healthz')
    assert resp.status_code == 405
    assert resp.get_json()['error']['status'] == 405
