"""
Integration tests for the API.
"""
import json


def test_health_endpoint(client):
    """Test the health endpoint returns a 200 response."""
    response = client.get('/health')
    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['status'] == 'healthy'
    assert data['environment'] == 'testing'
    assert data['database_connected'] is True


def test_api_docs_endpoint(client):
    """Test the API docs endpoint returns a 200 response."""
    response = client.get('/api/docs')
    assert response.status_code == 200
    assert b'Swagger' in response.data


def test_swagger_spec_lists_namespaces(client):
    """Test every namespace is registered in the Swagger document."""
    response = client.get('/swagger.json')
    assert response.status_code == 200
    paths = json.loads(response.data)['paths']
    for path in ('/api/auth/login', '/api/plans/', '/api/memberships/status',
                 '/api/members/', '/api/attendance/check-in'):
        assert path in paths


def test_list_plans(client):
    """Test listing the plan catalog."""
    response = client.get('/api/plans/')
    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['total'] == 3
    assert [p['id'] for p in data['plans']] == ['monthly', 'quarterly', '6month']
    assert data['plans'][0]['price'] == 699.0
    assert data['plans'][0]['duration_months'] == 1
    assert 'Locker room access' in data['plans'][0]['features']


def test_get_plan(client):
    """Test fetching one plan and an unknown one."""
    response = client.get('/api/plans/6month')
    assert response.status_code == 200
    assert json.loads(response.data)['name'] == '6 Month Plan'

    response = client.get('/api/plans/yearly')
    assert response.status_code == 404
    data = json.loads(response.data)
    assert data['error'] == 'plan_not_found'
    assert data['retryable'] is False
