"""
Tests for the resource routes and the download counter behind them.
"""
import os

import pytest

from mentorhub.models import ResourceModel

from tests.helpers import upload


@pytest.fixture
def resource(client, login, admin_id):
    login(admin_id)
    response = client.post('/api/resources', data={
        'title': 'Style guide',
        'file_type': 'pdf',
        'is_published': 'true',
        'file': upload('guide.pdf', b'guide'),
    }, content_type='multipart/form-data')
    assert response.status_code == 201
    return response.get_json()['data']


def test_admin_creates_resource(resource, admin_id):
    assert resource['uploaded_by'] == admin_id
    assert resource['download_count'] == 0
    assert resource['is_published'] is True


def test_participant_may_not_create(client, login, participant_id):
    login(participant_id)
    response = client.post('/api/resources', data={'title': 'x', 'file_type': 'pdf', 'file': upload()},
                           content_type='multipart/form-data')
    assert response.status_code == 403


def test_any_role_lists_with_stats(client, login, resource, add_row, admin_id, participant_id):
    add_row(ResourceModel, title='Draft', file_url='uploads/resources/d.pdf', file_type='pdf',
            uploaded_by=admin_id, download_count=4)
    login(participant_id)
    response = client.get('/api/resources')
    assert response.status_code == 200
    data = response.get_json()['data']
    assert len(data['resources']) == 2
    assert data['stats'] == {'total': 2, 'published_count': 1, 'total_downloads': 4}


def test_download_counts(client, login, resource, participant_id):
    login(participant_id)
    response = client.get(f"/api/resources/download/{resource['id']}")
    assert response.status_code == 200
    assert response.data == b'guide'
    response.close()

    response = client.get(f"/api/resources/{resource['id']}")
    assert response.get_json()['data']['download_count'] == 1


def test_missing_file_is_not_counted(client, login, add_row, admin_id):
    resource_id = add_row(ResourceModel, title='Gone', file_url='uploads/resources/gone.pdf',
                          file_type='pdf', uploaded_by=admin_id, download_count=2)
    login(admin_id)
    assert client.get(f'/api/resources/download/{resource_id}').status_code == 404
    assert client.get(f'/api/resources/{resource_id}').get_json()['data']['download_count'] == 2


def test_update_and_delete_are_admin_only(client, login, resource, participant_id, admin_id):
    login(participant_id)
    assert client.put(f"/api/resources/{resource['id']}", json={'title': 'Mine'}).status_code == 403
    assert client.delete(f"/api/resources/{resource['id']}").status_code == 403

    login(admin_id)
    response = client.put(f"/api/resources/{resource['id']}", json={'is_published': False})
    assert response.status_code == 200
    assert response.get_json()['data']['is_published'] is False
    assert client.delete(f"/api/resources/{resource['id']}").status_code == 200
    assert client.get(f"/api/resources/{resource['id']}").status_code == 404


def test_download_alias_counts_too(client, login, resource, participant_id):
    login(participant_id)
    response = client.get(f"/api/resources/{resource['id']}/download")
    assert response.status_code == 200
    assert response.data == b'guide'
    response.close()

    response = client.get(f"/api/resources/{resource['id']}")
    assert response.get_json()['data']['download_count'] == 1


def test_failed_update_keeps_the_old_file(app, client, login, resource, admin_id, monkeypatch):
    def _update(cls, row, fields):
        raise RuntimeError('database is locked')
    monkeypatch.setattr(ResourceModel, 'update', classmethod(_update))

    login(admin_id)
    response = client.put(f"/api/resources/{resource['id']}", data={'file': upload('guide.pdf', b'v2')},
                          content_type='multipart/form-data')
    assert response.status_code == 500
    assert os.path.isfile(os.path.join(app.config['UPLOAD_FOLDER'], resource['file_url']))
    assert len(os.listdir(os.path.join(app.config['UPLOAD_FOLDER'], 'uploads', 'resources'))) == 1


def test_replacing_the_file_removes_the_old_one(app, client, login, resource, admin_id):
    login(admin_id)
    response = client.put(f"/api/resources/{resource['id']}", data={'file': upload('guide.pdf', b'v2')},
                          content_type='multipart/form-data')
    assert response.status_code == 200
    folder = app.config['UPLOAD_FOLDER']
    assert not os.path.exists(os.path.join(folder, resource['file_url']))
    assert os.path.isfile(os.path.join(folder, response.get_json()['data']['file_url']))
