"""Tests for /auth routes: register, login, logout, forgot password."""

from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from pymongo.errors import PyMongoError

from adapter.mongodb.user_repository import MongoUserRepository
from api.dependencies import get_user_repo
from api.main import app
from api.tests.route_helpers import PASSWORD, RouteTestCase
from domain.model.user import MAX_SESSIONS
from services.token_service import create_access_token
from utils.settings import Settings


class TestRegister(RouteTestCase):
    """Tests for POST /auth/register."""

    def _register(self, **overrides):
        body = {
            'first_name': 'Ada',
            'last_name': 'Lovelace',
            'username': 'Ada1815',
            'email': 'ada@example.com',
            'password': PASSWORD,
        }
        body.update(overrides)
        return self.client.post('/auth/register', json=body)

    def test_register_returns_token_and_sets_cookies(self):
        response = self._register()

        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertTrue(data['success'])
        self.assertTrue(data['token'])
        self.assertEqual(data['user']['email'], 'ada@example.com')
        self.assertEqual(data['user']['role'], 'user')
        self.assertNotIn('password', response.text)

        cookies = self.set_cookies(response)
        auth = next(c for c in cookies if c.startswith('authToken='))
        status = next(c for c in cookies if c.startswith('loggedIn='))
        self.assertIn(data['token'], auth)
        self.assertIn('HttpOnly', auth)
        self.assertIn('Path=/', auth)
        self.assertIn('loggedIn=true', status)
        self.assertNotIn('HttpOnly', status)

    def test_register_opens_first_session(self):
        response = self._register()

        user = self.users.get_by_email('ada@example.com')
        self.assertEqual(len(user.sessions), 1)
        self.assertEqual(user.username, 'ada1815')
        self.assertEqual(response.json()['user']['id'], user.id)

    def test_duplicate_email_conflicts(self):
        self._register()

        response = self._register(username='someoneelse')

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json(), {'success': False, 'error': 'Email is already registered.'})

    def test_invalid_email_is_bad_request(self):
        response = self._register(email='not-an-email')

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()['success'])
        self.assertIn('email', response.json()['error'])

    def test_short_password_is_bad_request(self):
        response = self._register(password='123')
        self.assertEqual(response.status_code, 400)

    def test_password_over_72_bytes_is_bad_request(self):
        """30 three-byte characters pass the length check but exceed bcrypt's byte limit."""
        response = self._register(password='\u5bc6' * 30)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Password must be at most 72 bytes long.')
        self.assertIsNone(self.users.get_by_email('ada@example.com'))


class TestLogin(RouteTestCase):
    """Tests for POST /auth/login."""

    def setUp(self):
        super().setUp()
        self.user = self.create_user()

    def test_login_success(self):
        response = self.client.post('/auth/login', json={'email': 'ada@example.com', 'password': PASSWORD})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['user']['id'], self.user.id)
        self.assertTrue(any(c.startswith('authToken=') for c in self.set_cookies(response)))

    def test_missing_fields(self):
        response = self.client.post('/auth/login', json={'email': 'ada@example.com'})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Please provide email and password.')

    def test_wrong_password_creates_no_session(self):
        response = self.client.post('/auth/login', json={'email': 'ada@example.com', 'password': 'wrong'})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['error'], 'Invalid credentials.')
        self.assertEqual(self.users.get_by_id(self.user.id).sessions, [])

    def test_unknown_email_same_error(self):
        response = self.client.post('/auth/login', json={'email': 'ghost@example.com', 'password': PASSWORD})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['error'], 'Invalid credentials.')

    def test_sixth_login_evicts_oldest(self):
        tokens = [self.login(device=f'device-{n}') for n in range(MAX_SESSIONS + 1)]

        self.assertEqual(len(self.users.get_by_id(self.user.id).sessions), MAX_SESSIONS)

        oldest = self.client.get('/users/me', headers=self.bearer(tokens[0]))
        self.assertEqual(oldest.status_code, 401)
        self.assertEqual(oldest.json()['error'], 'Invalid session. Please log in again.')

        newest = self.client.get('/users/sessions', headers=self.bearer(tokens[-1]))
        self.assertEqual(newest.status_code, 200)
        self.assertEqual(newest.json()['count'], MAX_SESSIONS)

    def test_login_records_device_and_ip(self):
        self.client.post(
            '/auth/login',
            json={'email': 'ada@example.com', 'password': PASSWORD},
            headers={'User-Agent': 'Mozilla/5.0 Test', 'X-Forwarded-For': '203.0.113.7, 10.0.0.1'},
        )

        session = self.users.get_by_id(self.user.id).sessions[0]
        self.assertEqual(session.device, 'Mozilla/5.0 Test')
        self.assertEqual(session.ip, '203.0.113.7')


class TestLogout(RouteTestCase):
    """Tests for POST /auth/logout."""

    def setUp(self):
        super().setUp()
        self.user = self.create_user()

    def test_logout_removes_session_and_clears_cookies(self):
        token = self.login()

        response = self.client.post('/auth/logout', headers=self.bearer(token))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'success': True, 'data': {}})
        cookies = self.set_cookies(response)
        self.assertTrue(any(c.startswith('authToken=none') for c in cookies))
        self.assertTrue(any(c.startswith('loggedIn=none') for c in cookies))
        self.assertEqual(self.users.get_by_id(self.user.id).sessions, [])

        again = self.client.get('/users/me', headers=self.bearer(token))
        self.assertEqual(again.status_code, 401)

    def test_logout_keeps_other_devices(self):
        phone = self.login(device='Phone')
        laptop = self.login(device='Laptop')

        self.client.post('/auth/logout', headers=self.bearer(phone))

        self.assertEqual(self.client.get('/users/me', headers=self.bearer(laptop)).status_code, 200)

    def test_logout_without_token(self):
        response = self.client.post('/auth/logout')

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['error'], 'Not authorized, token missing.')
        self.assertTrue(any(c.startswith('authToken=none') for c in self.set_cookies(response)))


class TestTokenSources(RouteTestCase):
    """Cookie and Bearer header are both accepted; the cookie wins when both are sent."""

    def setUp(self):
        super().setUp()
        self.create_user()
        self.token = self.login()

    def test_cookie_auth(self):
        client = TestClient(app)
        response = client.get('/users/me', headers={'Cookie': f'authToken={self.token}'})
        self.assertEqual(response.status_code, 200)

    def test_bearer_auth(self):
        response = self.client.get('/users/me', headers=self.bearer(self.token))
        self.assertEqual(response.status_code, 200)

    def test_cookie_takes_precedence_over_header(self):
        client = TestClient(app)
        response = client.get('/users/me', headers={
            'Cookie': 'authToken=garbage',
            'Authorization': f'Bearer {self.token}',
        })
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['error'], 'Token is invalid or expired.')

    def test_invalid_token_clears_cookies(self):
        response = self.client.get('/users/me', headers=self.bearer('garbage'))

        self.assertEqual(response.status_code, 401)
        cookies = self.set_cookies(response)
        self.assertTrue(any(c.startswith('authToken=none') for c in cookies))
        self.assertTrue(any(c.startswith('loggedIn=none') for c in cookies))


class TestForgotPassword(RouteTestCase):

    def test_requires_email_or_phone(self):
        response = self.client.post('/auth/forgotpassword', json={})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Please provide email or phone number.')

    def test_same_answer_for_unknown_account(self):
        response = self.client.post('/auth/forgotpassword', json={'email': 'ghost@example.com'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json()['message'],
            'If your account details are correct, a reset link/code has been sent.',
        )


class TestDatabaseFailure(RouteTestCase):
    """A failing user store is a server error, never a credentials or session failure."""

    def setUp(self):
        super().setUp()
        db = MagicMock()
        db.__getitem__.return_value.find_one.side_effect = PyMongoError('connection reset')
        app.dependency_overrides[get_user_repo] = lambda: MongoUserRepository(db)

    def test_login_returns_500(self):
        response = self.client.post('/auth/login', json={'email': 'ada@example.com', 'password': PASSWORD})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'success': False, 'error': 'Login failed due to a server error.'})
        self.assertEqual(self.set_cookies(response), [])

    def test_authenticated_route_keeps_cookies(self):
        token, _ = create_access_token(self.settings, 'u1', 's1')

        response = self.client.get('/users/me', headers=self.bearer(token))

        self.assertEqual(response.status_code, 500)
        self.assertFalse(response.json()['success'])
        self.assertEqual(self.set_cookies(response), [])


class TestClearedCookieAttributes(RouteTestCase):

    def setUp(self):
        super().setUp()
        app.state.settings = Settings(jwt_secret_key='test-secret', environment='production')
        self.addCleanup(delattr, app.state, 'settings')

    def test_production_401_clears_secure_cookies(self):
        response = self.client.get('/users/me', headers=self.bearer('garbage'))

        self.assertEqual(response.status_code, 401)
        cookies = self.set_cookies(response)
        self.assertEqual(len(cookies), 2)
        for cookie in cookies:
            self.assertIn('Secure', cookie)
