"""
Tests for registration, login, logout and password reset
"""
from datetime import timedelta
from unittest.mock import patch

from conftest import PASSWORD, register_user, bearer
from db import db
from models.user import User
from repositories.user_repository import UserRepository
from utils import now_utc


class TestRegister:
    """Tests for POST /api/auth/register"""

    def test_register_returns_token_and_user(self, client):
        body = register_user(client, email='new@example.com', username='newbie')
        assert body['token']
        assert body['user']['email'] == 'new@example.com'
        assert body['user']['username'] == 'newbie'
        assert body['user']['onboarded'] is False

    def test_register_sets_http_only_cookie(self, app):
        cookie_client = app.test_client()
        response = cookie_client.post('/api/auth/register', json={
            'email': 'cookie@example.com', 'username': 'cookie', 'password': PASSWORD,
        })
        set_cookie = response.headers.get('Set-Cookie')
        assert set_cookie.startswith('auth=')
        assert 'HttpOnly' in set_cookie
        assert 'SameSite=Lax' in set_cookie

    def test_password_is_hashed(self, app, client, user):
        with app.app_context():
            stored = UserRepository.get_by_id(user['user']['id'])
            assert stored.password_hash != PASSWORD
            assert stored.password_hash.startswith('pbkdf2:sha256')

    def test_field_errors(self, client):
        response = client.post('/api/auth/register', json={'email': 'nope', 'username': 'a', 'password': 'short'})
        assert response.status_code == 400
        errors = response.get_json()['error']
        assert errors['email'] == ['Invalid email']
        assert 'Username must be at least 2 characters' in errors['username']
        assert 'Password must be at least 8 characters' in errors['password']

    def test_duplicate_email(self, client, user):
        response = client.post('/api/auth/register', json={
            'email': 'alice@example.com', 'username': 'alice2', 'password': PASSWORD,
        })
        assert response.status_code == 409
        assert response.get_json()['error'] == 'Email already registered'

    def test_duplicate_username(self, client, user):
        response = client.post('/api/auth/register', json={
            'email': 'alice2@example.com', 'username': 'alice', 'password': PASSWORD,
        })
        assert response.status_code == 409
        assert response.get_json()['error'] == 'Username already taken'


class TestLogin:
    """Tests for POST /api/auth/login"""

    def test_login_with_email(self, client, user):
        response = client.post('/api/auth/login', json={'email': 'alice@example.com', 'password': PASSWORD})
        assert response.status_code == 200
        assert response.get_json()['user']['id'] == user['user']['id']

    def test_login_with_username_ignores_case(self, client, user):
        response = client.post('/api/auth/login', json={'email': 'ALICE', 'password': PASSWORD})
        assert response.status_code == 200

    def test_wrong_password(self, client, user):
        response = client.post('/api/auth/login', json={'email': 'alice@example.com', 'password': 'wrong1234'})
        assert response.status_code == 401
        assert response.get_json()['error'] == 'Invalid email/username or password'

    def test_unknown_user_gets_same_message(self, client):
        response = client.post('/api/auth/login', json={'email': 'ghost@example.com', 'password': PASSWORD})
        assert response.status_code == 401
        assert response.get_json()['error'] == 'Invalid email/username or password'

    def test_missing_fields(self, client):
        response = client.post('/api/auth/login', json={})
        assert response.status_code == 400
        assert set(response.get_json()['error']) == {'email', 'password'}


class TestTokens:
    """Tests for bearer and cookie authentication"""

    def test_bearer_token_authenticates(self, client, user):
        response = client.get('/api/me', headers=user['headers'])
        assert response.status_code == 200
        assert response.get_json()['user']['username'] == 'alice'

    def test_cookie_authenticates(self, app):
        cookie_client = app.test_client()
        register_user(cookie_client)
        assert cookie_client.get('/api/me').status_code == 200

    def test_bad_token_is_unauthorized(self, client):
        response = client.get('/api/me', headers=bearer('not-a-token'))
        assert response.status_code == 401
        assert response.get_json() == {'error': 'Unauthorized'}

    def test_token_of_deleted_user_is_unauthorized(self, app, client, user):
        with app.app_context():
            db.session.delete(db.session.get(User, user['user']['id']))
            db.session.commit()
        assert client.get('/api/me', headers=user['headers']).status_code == 401

    def test_logout_clears_cookie(self, client):
        response = client.post('/api/auth/logout')
        assert response.status_code == 200
        assert response.get_json() == {'message': 'Logged out'}
        assert 'auth=;' in response.headers.get('Set-Cookie')


class TestPasswordReset:
    """Tests for forgot-password and reset-password"""

    def test_forgot_password_sends_link(self, app, client, user):
        with patch('mailer.send_password_reset_email') as send:
            response = client.post('/api/auth/forgot-password', json={'email': 'alice@example.com'})
        assert response.status_code == 200
        assert response.get_json()['message'] == 'If that email is registered, you will receive a reset link.'

        send.assert_called_once()
        to, url, locale = send.call_args[0]
        assert to == 'alice@example.com'
        assert locale == 'en'
        with app.app_context():
            token = UserRepository.get_by_id(user['user']['id']).reset_token
        assert len(token) == 64
        assert url == f'http://localhost:5173/reset-password?token={token}'

    def test_forgot_password_unknown_email_looks_the_same(self, client):
        with patch('mailer.send_password_reset_email') as send:
            response = client.post('/api/auth/forgot-password', json={'email': 'ghost@example.com'})
        assert response.status_code == 200
        assert response.get_json()['message'] == 'If that email is registered, you will receive a reset link.'
        send.assert_not_called()

    def _request_token(self, app, client, user):
        with patch('mailer.send_password_reset_email'):
            client.post('/api/auth/forgot-password', json={'email': 'alice@example.com'})
        with app.app_context():
            return UserRepository.get_by_id(user['user']['id']).reset_token

    def test_reset_password_changes_password_and_logs_in(self, app, client, user):
        token = self._request_token(app, client, user)
        response = client.post('/api/auth/reset-password', json={'token': token, 'password': 'newpass456'})
        assert response.status_code == 200
        assert response.get_json()['token']

        login = client.post('/api/auth/login', json={'email': 'alice', 'password': 'newpass456'})
        assert login.status_code == 200
        with app.app_context():
            assert UserRepository.get_by_id(user['user']['id']).reset_token is None

    def test_reset_token_is_single_use(self, app, client, user):
        token = self._request_token(app, client, user)
        client.post('/api/auth/reset-password', json={'token': token, 'password': 'newpass456'})
        again = client.post('/api/auth/reset-password', json={'token': token, 'password': 'other789x'})
        assert again.status_code == 400
        assert again.get_json()['error'] == 'Invalid or expired reset link. Request a new one.'

    def test_expired_reset_token(self, app, client, user):
        token = self._request_token(app, client, user)
        with app.app_context():
            UserRepository.update(user['user']['id'], reset_token_expires=now_utc() - timedelta(minutes=1))
        response = client.post('/api/auth/reset-password', json={'token': token, 'password': 'newpass456'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid or expired reset link. Request a new one.'

    def test_reset_validates_password(self, client):
        response = client.post('/api/auth/reset-password', json={'token': 'abc', 'password': 'short'})
        assert response.status_code == 400
        assert 'password' in response.get_json()['error']
