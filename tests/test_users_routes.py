"""
Tests for public profiles
"""


def seed_logs(client, headers):
    client.post('/api/logs', headers=headers, json={
        'mediaType': 'movies', 'externalId': '1', 'title': 'A', 'grade': 6, 'status': 'watched', 'contentHours': 2,
    })
    client.post('/api/logs', headers=headers, json={
        'mediaType': 'books', 'externalId': 'OL1W', 'title': 'B', 'grade': 9, 'status': 'read', 'contentHours': 10,
    })


class TestPublicProfile:
    """Tests for /api/users/<id>"""

    def test_profile_has_no_private_fields(self, client, user):
        seed_logs(client, user['headers'])
        response = client.get(f"/api/users/{user['user']['id']}")
        assert response.status_code == 200
        profile = response.get_json()
        assert profile['username'] == 'alice'
        assert profile['logCount'] == 2
        assert 'email' not in profile
        assert 'apiKeys' not in profile

    def test_malformed_id(self, client):
        response = client.get('/api/users/not-an-id')
        assert response.status_code == 404
        assert response.get_json()['error'] == 'User not found'

    def test_unknown_id(self, client):
        assert client.get('/api/users/' + 'a' * 32).status_code == 404


class TestPublicLogs:
    """Tests for /api/users/<id>/logs and /logs/stats"""

    def test_logs_are_public(self, client, user):
        seed_logs(client, user['headers'])
        logs = client.get(f"/api/users/{user['user']['id']}/logs?sort=grade").get_json()
        assert [log['title'] for log in logs] == ['B', 'A']

    def test_logs_filtered_by_type(self, client, user):
        seed_logs(client, user['headers'])
        logs = client.get(f"/api/users/{user['user']['id']}/logs?mediaType=books").get_json()
        assert [log['externalId'] for log in logs] == ['OL1W']

    def test_stats(self, client, user):
        seed_logs(client, user['headers'])
        stats = client.get(f"/api/users/{user['user']['id']}/logs/stats?group=category").get_json()
        assert stats['group'] == 'category'
        assert stats['data'] == [{'period': 'books', 'hours': 10}, {'period': 'movies', 'hours': 2}]

    def test_stats_unknown_user(self, client):
        assert client.get('/api/users/' + 'b' * 32 + '/logs/stats').status_code == 404
