"""Tests for the backup endpoints"""

from concurrent.futures import Future

from trackhabit.services.container import container


def test_create_and_list_backups(client):
    created = client.post('/backup/')

    assert created.status_code == 201
    artifact = created.get_json()['data']
    assert artifact['name'].startswith('backup_')

    listing = client.get('/backup/').get_json()
    assert listing['success'] is True
    assert [item['name'] for item in listing['data']] == [artifact['name']]

def test_list_without_backups(client):
    response = client.get('/backup/')

    assert response.status_code == 200
    assert response.get_json() == {'success': True, 'data': []}

def test_restore_round_trip(client, app):
    client.post('/habits', json={'name': 'Reading'})
    artifact = client.post('/backup/').get_json()['data']
    client.post('/habits', json={'name': 'Added later'})

    response = client.post('/backup/restore', json={'path': artifact['name']})

    assert response.status_code == 200
    body = response.get_json()
    assert body['data']['safety_backup']['name'].startswith('backup_')
    names = [h['name'] for h in client.get('/habits').get_json()['data']]
    assert names == ['Reading']
    assert len(client.get('/backup/').get_json()['data']) == 2

def test_restore_without_safety_backup(client):
    artifact = client.post('/backup/').get_json()['data']

    response = client.post('/backup/restore', json={'path': artifact['name'], 'safety_backup': False})

    assert response.status_code == 200
    assert response.get_json()['data']['safety_backup'] is None
    assert len(client.get('/backup/').get_json()['data']) == 1

def test_restore_invalid_backup(client, tmp_path):
    junk = tmp_path / "backups" / "junk.zip"
    junk.parent.mkdir(parents=True, exist_ok=True)
    junk.write_bytes(b"nope")

    response = client.post('/backup/restore', json={'path': junk.name, 'safety_backup': False})

    assert response.status_code == 400
    error = response.get_json()['error']
    assert error['kind'] == 'invalid_backup'
    assert error['message']

def test_restore_requires_path(client):
    assert client.post('/backup/restore', json={}).status_code == 400

def test_delete_backup(client):
    artifact = client.post('/backup/').get_json()['data']

    first = client.delete('/backup/', json={'path': artifact['name']})
    second = client.delete('/backup/', query_string={'path': artifact['name']})

    assert first.status_code == 200
    assert second.status_code == 200
    assert client.get('/backup/').get_json()['data'] == []

def test_delete_refuses_store_file(client, app):
    response = client.delete('/backup/', json={'path': app.config['DATABASE_PATH']})

    assert response.status_code == 400
    assert response.get_json()['error']['kind'] == 'invalid_backup'

def test_operation_timeout(client, app, mocker):
    backup_manager = container(app).get('backup_manager')
    mocker.patch.object(backup_manager, 'list_available_backups', return_value=Future())
    app.config['BACKUP_TIMEOUT'] = 0.01

    response = client.get('/backup/')

    assert response.status_code == 202
    body = response.get_json()
    assert body['pending'] is True
    assert body['success'] is False
    assert 'error' not in body

def test_restore_refuses_path_outside_backup_directory(client, tmp_path):
    client.post('/habits', json={'name': 'Reading'})
    outside = tmp_path / "elsewhere" / "export.zip"
    client.post('/backup/')

    response = client.post('/backup/restore', json={'path': str(outside), 'safety_backup': False})

    assert response.status_code == 400
    assert response.get_json()['error']['kind'] == 'invalid_backup'
    assert [h['name'] for h in client.get('/habits').get_json()['data']] == ['Reading']

def test_restore_refuses_parent_traversal(client):
    response = client.post('/backup/restore', json={'path': '..', 'safety_backup': False})

    assert response.status_code == 400
    assert response.get_json()['error']['kind'] == 'invalid_backup'

def test_delete_refuses_path_outside_backup_directory(client, tmp_path):
    victim = tmp_path / "elsewhere" / "backup_2024-05-01_03-00-00_0001.zip"
    victim.parent.mkdir()
    victim.write_bytes(b"keep me")

    response = client.delete('/backup/', json={'path': str(victim)})

    assert response.status_code == 400
    assert victim.exists()

def test_list_refuses_directory_outside_backup_directory(client, tmp_path):
    response = client.get('/backup/', query_string={'directory': str(tmp_path)})

    assert response.status_code == 400
    assert response.get_json()['error']['kind'] == 'invalid_backup'

def test_create_refuses_destination_outside_backup_directory(client, tmp_path):
    target = tmp_path / "elsewhere" / "export.zip"

    response = client.post('/backup/', json={'destination': str(target)})

    assert response.status_code == 400
    assert not target.exists()

def test_create_with_backup_name(client, tmp_path):
    response = client.post('/backup/', json={'destination': 'export.zip'})

    assert response.status_code == 201
    assert (tmp_path / "backups" / "export.zip").is_file()

def test_paths_inside_backup_directory_are_accepted(client, tmp_path):
    artifact = client.post('/backup/').get_json()['data']

    listing = client.get('/backup/', query_string={'directory': str(tmp_path / "backups")})
    deleted = client.delete('/backup/', json={'path': str(tmp_path / "backups" / artifact['name'])})

    assert listing.status_code == 200
    assert [item['name'] for item in listing.get_json()['data']] == [artifact['name']]
    assert deleted.status_code == 200

def test_restore_timeout_reports_pending(client, app, mocker):
    backup_manager = container(app).get('backup_manager')
    mocker.patch.object(backup_manager, 'restore_from_backup', return_value=Future())
    app.config['BACKUP_TIMEOUT'] = 0.01

    response = client.post('/backup/restore', json={'path': 'backup_2024-05-01_03-00-00_0001.zip',
                                                    'safety_backup': False})

    assert response.status_code == 202
    assert response.get_json()['pending'] is True
