"""Test the HTTP endpoints."""
import json

import pytest

from attendly import create_app
from attendly.config.testing import TestingConfig
from attendly.models.class_section import Coordinate
from attendly.services.device_state import DeviceState
from attendly.services.token_service import TokenService
from tests.conftest import north_of

CLASS_BODY = {
    'name': 'Intro to Design Systems',
    'section': 'A',
    'semester': 'Spring 2026',
    'room': 'Fine Arts 201',
    'meeting_days': ['Mon', 'Wed'],
    'latitude': 0.0,
    'longitude': 0.0,
    'geofence_radius': 30
}

@pytest.fixture
def class_id(client):
    response = client.post('/api/classes', json=CLASS_BODY)
    return json.loads(response.data)['data']['id']

@pytest.fixture
def session_id(client, class_id, clock):
    clock.at(0)
    response = client.post(f'/api/sessions/start/{class_id}', json={})
    return json.loads(response.data)['data']['id']

def _token(client, session_id):
    response = client.get(f'/api/sessions/{session_id}/token')
    return json.loads(response.data)['data']['token']

def test_health_check(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert json.loads(response.data)['status'] == 'healthy'

def test_create_class(client):
    response = client.post('/api/classes', json=CLASS_BODY)
    
    assert response.status_code == 201
    data = json.loads(response.data)
    assert data['error'] == False
    assert data['data']['name'] == 'Intro to Design Systems'
    assert data['data']['coordinate'] == {'latitude': 0.0, 'longitude': 0.0}
    assert data['data']['live_session_id'] is None

def test_create_class_validation(client):
    response = client.post('/api/classes', json={})
    assert response.status_code == 400
    
    response = client.post('/api/classes', json={**CLASS_BODY, 'geofence_radius': -5})
    assert response.status_code == 400
    
    response = client.post('/api/classes', json={**CLASS_BODY, 'latitude': 'north'})
    assert response.status_code == 400

def test_unknown_class(client):
    assert client.get('/api/classes/nope').status_code == 404
    assert client.post('/api/sessions/start/nope', json={}).status_code == 404

def test_start_session_uses_configured_defaults(client, class_id):
    response = client.post(f'/api/sessions/start/{class_id}', json={})
    
    assert response.status_code == 201
    data = json.loads(response.data)['data']
    assert data['rotation_window_seconds'] == 90
    assert data['late_threshold_minutes'] == 5
    assert data['is_live'] is True

@pytest.mark.parametrize('window', [0, 0.5])
def test_start_session_rejects_sub_second_window(client, class_id, window):
    response = client.post(f'/api/sessions/start/{class_id}', json={'rotation_window_seconds': window})
    
    assert response.status_code == 400
    assert 'rotation_window_seconds' in json.loads(response.data)['message']

def test_second_live_session_conflicts(client, class_id, session_id):
    response = client.post(f'/api/sessions/start/{class_id}', json={'rotation_window_seconds': 60})
    
    assert response.status_code == 409
    assert json.loads(response.data)['error'] == True

def test_token_endpoint(client, session_id):
    response = client.get(f'/api/sessions/{session_id}/token?image=1')
    
    assert response.status_code == 200
    data = json.loads(response.data)['data']
    is_valid, payload, _ = TokenService.decode(data['token'])
    assert is_valid
    assert payload.session_id == session_id
    assert data['refresh_in_seconds'] == 90
    assert data['qr_image'].startswith('data:image/png;base64,')

def test_scan_flow(client, class_id, session_id, clock):
    token = _token(client, session_id)
    clock.at(10)
    
    response = client.post('/api/attendance/scan', json={'token': token, 'latitude': 0.0, 'longitude': 0.0})
    assert response.status_code == 200
    data = json.loads(response.data)['data']
    assert data['result'] == 'success'
    assert data['record']['status'] == 'onTime'
    
    response = client.post('/api/attendance/scan', json={'token': token, 'latitude': 0.0, 'longitude': 0.0})
    assert json.loads(response.data)['data']['result'] == 'alreadyCheckedIn'
    
    count = json.loads(client.get(f'/api/sessions/{session_id}/count').data)['data']
    assert count['attendance_count'] == 1
    
    history = json.loads(client.get('/api/attendance/history').data)['data']
    assert len(history) == 1
    assert history[0]['class_name'] == 'Intro to Design Systems'
    
    summary = json.loads(client.get('/api/attendance/summary').data)['data']
    assert summary['summary']['on_time_count'] == 1
    assert summary['summary']['attendance_percentage'] == 100.0
    assert [c['id'] for c in summary['classes']] == [class_id]

def test_scan_outcomes_are_not_http_errors(client, session_id, clock):
    token = _token(client, session_id)
    far = north_of(Coordinate(0.0, 0.0), 50)
    
    response = client.post('/api/attendance/scan', json={'token': token})
    assert response.status_code == 200
    assert json.loads(response.data)['data']['result'] == 'outsideGeofence'
    
    response = client.post('/api/attendance/scan', json={
        'token': token, 'latitude': far.latitude, 'longitude': far.longitude
    })
    assert json.loads(response.data)['data']['result'] == 'outsideGeofence'
    
    response = client.post('/api/attendance/scan', json={'token': 'garbage'})
    assert response.status_code == 200
    assert json.loads(response.data)['data']['result'] == 'invalid'
    
    clock.at(400)
    response = client.post('/api/attendance/scan', json={'token': token, 'latitude': 0.0, 'longitude': 0.0})
    assert json.loads(response.data)['data']['result'] == 'expired'

def test_scan_request_validation(client):
    assert client.post('/api/attendance/scan', json={}).status_code == 400
    response = client.post('/api/attendance/scan', json={'token': 'x', 'latitude': 'here'})
    assert response.status_code == 400

def test_end_session_locks_scans(client, class_id, session_id, clock):
    token = _token(client, session_id)
    
    response = client.post(f'/api/sessions/end/{class_id}')
    assert response.status_code == 200
    assert json.loads(response.data)['data']['is_locked'] is True
    
    response = client.post('/api/attendance/scan', json={'token': token, 'latitude': 0.0, 'longitude': 0.0})
    assert json.loads(response.data)['data']['result'] == 'locked'
    
    assert client.get(f'/api/sessions/{session_id}/token').status_code == 400
    active = json.loads(client.get(f'/api/sessions/active/{class_id}').data)
    assert active.get('data') is None
    
    response = client.post(f'/api/sessions/end/{class_id}')
    assert json.loads(response.data)['message'] == 'No live session to end'

def test_preview(client, class_id, session_id):
    token = _token(client, session_id)
    
    response = client.post('/api/attendance/preview', json={'token': token})
    
    data = json.loads(response.data)['data']
    assert data['class']['id'] == class_id
    assert data['is_enrolled'] is False

def test_export_csv(client, session_id, clock):
    token = _token(client, session_id)
    client.post('/api/attendance/scan', json={'token': token, 'latitude': 0.0, 'longitude': 0.0})
    
    response = client.get('/api/attendance/export')
    
    assert response.status_code == 200
    assert response.mimetype == 'text/csv'
    lines = response.get_data(as_text=True).split('\n')
    assert lines[0] == 'recordId,sessionId,studentId,status,timestamp,locationVerified'
    assert lines[1].split(',')[1] == session_id
    assert lines[1].endswith(',onTime,2027-01-15T08:00:00Z,true')
    assert lines[2] == ''
    
    response = client.get('/api/attendance/export?session_id=other')
    assert response.get_data(as_text=True).count('\n') == 1

def test_default_rate_limit_comes_from_config(monkeypatch):
    monkeypatch.setattr(TestingConfig, 'RATELIMIT_ENABLED', True)
    monkeypatch.setattr(TestingConfig, 'RATELIMIT_DEFAULT', '2 per minute')
    client = create_app('testing', state=DeviceState()).test_client()
    
    codes = [client.get('/api/classes').status_code for _ in range(3)]
    
    assert codes == [200, 200, 429]
