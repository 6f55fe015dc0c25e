"""
Pytest fixtures and configuration for OMNILOG tests
"""
import os
import sys
import tempfile
import pytest
from unittest.mock import MagicMock

# Add app directory to path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'app'))

# Settings and the secret key are read at import time
os.environ['OMNILOG_CONFIG_DIR'] = tempfile.mkdtemp(prefix='omnilog-tests-')
os.environ['SECRET_KEY'] = 'test-secret-key'

from constants import ENV_OVERRIDES  # noqa: E402

for _env_name in ENV_OVERRIDES.values():
    os.environ.pop(_env_name, None)

import settings  # noqa: E402
from app import create_app  # noqa: E402
from db import db  # noqa: E402
from repositories.user_repository import UserRepository  # noqa: E402
from services.search_service import free_search_tracker  # noqa: E402

PASSWORD = 'secret123'


@pytest.fixture
def app():
    """Application bound to an in-memory database"""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'RATELIMIT_ENABLED': False,
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Test client without a cookie jar, so only explicit headers authenticate"""
    return app.test_client(use_cookies=False)


@pytest.fixture(autouse=True)
def fresh_state():
    """Reset cached settings and keyless search counters between tests"""
    settings.reload_conf()
    free_search_tracker.clear()
    yield
    free_search_tracker.clear()
    settings.reload_conf()


@pytest.fixture
def override_setting():
    """Set a value in the cached settings for the duration of a test"""
    def _override(section, key, value):
        settings.load_settings().setdefault(section, {})[key] = value
    return _override


def register_user(client, email='alice@example.com', username='alice', password=PASSWORD):
    response = client.post('/api/auth/register', json={
        'email': email,
        'username': username,
        'password': password,
    })
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def user(client):
    """Registered free-tier user: {'token', 'user', 'headers'}"""
    body = register_user(client)
    body['headers'] = bearer(body['token'])
    return body


@pytest.fixture
def other_user(client):
    body = register_user(client, email='bob@example.com', username='bob')
    body['headers'] = bearer(body['token'])
    return body


@pytest.fixture
def pro_user(app, client):
    body = register_user(client, email='carol@example.com', username='carol')
    with app.app_context():
        UserRepository.update(body['user']['id'], tier='pro')
    body['headers'] = bearer(body['token'])
    return body


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing"""
    logger = MagicMock()
    logger.info = MagicMock()
    logger.error = MagicMock()
    logger.warning = MagicMock()
    logger.debug = MagicMock()
    return logger


@pytest.fixture
def movie_log():
    """Body of a completed movie log"""
    return {
        'mediaType': 'movies',
        'externalId': '550',
        'title': 'Fight Club',
        'image': 'https://image.tmdb.org/t/p/w200/poster.jpg',
        'grade': 9,
        'review': 'First rule.',
        'status': 'watched',
    }


@pytest.fixture
def sample_search_results():
    """Search results in upstream order"""
    return [
        {'id': '1', 'title': 'beta', 'image': None, 'year': '2001', 'subtitle': None},
        {'id': '2', 'title': 'Alpha', 'image': None, 'year': None, 'subtitle': None},
        {'id': '3', 'title': 'gamma', 'image': None, 'year': '1999', 'subtitle': None},
        {'id': '4', 'title': 'Delta', 'image': None, 'year': '2001-05', 'subtitle': None},
    ]
