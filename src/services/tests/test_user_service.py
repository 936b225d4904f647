"""Unit tests for user_service and activity_service."""

import unittest
from unittest.mock import patch

from adapter.fake.activity_repository import FakeActivityRepository
from adapter.fake.user_repository import FakeUserRepository
from domain.model.activity import Activity
from domain.model.errors import (
    AuthenticationError,
    DuplicateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from domain.model.user import Role
from services import activity_service, auth_service, session_service, user_service
from services.auth_service import Registration
from utils.settings import Settings


class UserServiceTestCase(unittest.TestCase):

    def setUp(self):
        patcher = patch('services.auth_service.BCRYPT_ROUNDS', 4)
        patcher.start()
        self.addCleanup(patcher.stop)

        self.repo = FakeUserRepository()
        self.activities = FakeActivityRepository()
        self.settings = Settings(jwt_secret_key='test-secret')
        self.user = auth_service.register(self.repo, Registration(
            first_name='Ada', username='ada', email='ada@example.com', password='secret1',
        ))

    def _login(self, device='Firefox'):
        return session_service.open_session(self.repo, self.settings, self.user, device=device, ip='1.1.1.1')


class TestUpdateProfile(UserServiceTestCase):

    def test_updates_fields(self):
        grant = self._login()

        user = user_service.update_profile(
            self.repo, self.user.id, grant.session.session_id, 'secret1',
            {'first_name': 'Grace', 'username': 'Grace1', 'email': 'GRACE@example.com'},
        )

        self.assertEqual(user.first_name, 'Grace')
        self.assertEqual(user.username, 'grace1')
        self.assertEqual(user.email, 'grace@example.com')

    def test_wrong_current_password_keeps_cookies(self):
        grant = self._login()

        with self.assertRaises(AuthenticationError) as ctx:
            user_service.update_profile(
                self.repo, self.user.id, grant.session.session_id, 'wrong', {'first_name': 'X'}
            )
        self.assertEqual(str(ctx.exception), 'Incorrect current password.')
        self.assertFalse(ctx.exception.clear_cookies)

    def test_nothing_to_update(self):
        grant = self._login()

        with self.assertRaises(ValidationError) as ctx:
            user_service.update_profile(
                self.repo, self.user.id, grant.session.session_id, 'secret1', {'first_name': ''}
            )
        self.assertEqual(str(ctx.exception), 'No valid fields provided for update.')

    def test_short_new_password(self):
        grant = self._login()

        with self.assertRaises(ValidationError):
            user_service.update_profile(
                self.repo, self.user.id, grant.session.session_id, 'secret1', {'new_password': '123'}
            )

    def test_password_change_signs_out_other_devices(self):
        phone = self._login(device='Phone')
        laptop = self._login(device='Laptop')
        tablet = self._login(device='Tablet')

        user_service.update_profile(
            self.repo, self.user.id, laptop.session.session_id, 'secret1', {'new_password': 'newsecret'}
        )

        stored = self.repo.get_by_id(self.user.id)
        self.assertEqual([s.session_id for s in stored.sessions], [laptop.session.session_id])
        self.assertTrue(auth_service.verify_password('newsecret', stored.password_hash))
        for grant in (phone, tablet):
            with self.assertRaises(AuthenticationError):
                session_service.resolve_session(self.repo, self.settings, grant.token)

    def test_password_change_also_applies_fields(self):
        grant = self._login()

        user = user_service.update_profile(
            self.repo, self.user.id, grant.session.session_id, 'secret1',
            {'new_password': 'newsecret', 'phone': '+15550100'},
        )

        self.assertEqual(user.phone, '+15550100')

    def test_duplicate_username(self):
        auth_service.register(self.repo, Registration(
            first_name='Bob', username='bob', email='bob@example.com', password='secret1',
        ))
        grant = self._login()

        with self.assertRaises(DuplicateError):
            user_service.update_profile(
                self.repo, self.user.id, grant.session.session_id, 'secret1', {'username': 'bob'}
            )


class TestAccountDeletion(UserServiceTestCase):

    def test_delete_account_removes_activities(self):
        self.activities.save(Activity.create(user_id=self.user.id, page_route='/'))

        user_service.delete_account(self.repo, self.activities, self.user.id)

        self.assertIsNone(self.repo.get_by_id(self.user.id))
        self.assertEqual(self.activities.find_by_user(self.user.id), [])


class TestAdminOperations(UserServiceTestCase):

    def setUp(self):
        super().setUp()
        self.admin = auth_service.register(self.repo, Registration(
            first_name='Root', username='root', email='root@example.com', password='secret1',
        ), role=Role.ADMIN)

    def test_list_customers_excludes_admins(self):
        users = user_service.list_customers(self.repo)
        self.assertEqual([u.id for u in users], [self.user.id])

    def test_user_details(self):
        self.activities.save(Activity.create(user_id=self.user.id, page_route='/orders', duration_ms=5000))
        self.activities.save(Activity.create(user_id=self.user.id, page_route='/orders', duration_ms=1000))
        self.activities.save(Activity.create(user_id=self.user.id, page_route='/home', duration_ms=2000))

        details = user_service.get_user_details(self.repo, self.activities, self.user.id)

        self.assertEqual(details.user.id, self.user.id)
        self.assertEqual(len(details.activities), 3)
        self.assertEqual(details.top_pages[0].page, '/orders')
        self.assertEqual(details.top_pages[0].views, 2)
        self.assertEqual(details.top_pages[0].total_time_ms, 6000)

    def test_user_details_missing(self):
        with self.assertRaises(NotFoundError):
            user_service.get_user_details(self.repo, self.activities, 'nope')

    def test_delete_user(self):
        deleted = user_service.delete_user(self.repo, self.activities, self.user.id)
        self.assertEqual(deleted.email, 'ada@example.com')
        self.assertIsNone(self.repo.get_by_id(self.user.id))

    def test_admins_cannot_be_deleted(self):
        with self.assertRaises(PermissionDeniedError):
            user_service.delete_user(self.repo, self.activities, self.admin.id)

    def test_make_admin(self):
        user = user_service.make_admin(self.repo, ' Ada@Example.com ')
        self.assertEqual(user.role, Role.ADMIN)

    def test_make_admin_requires_email(self):
        with self.assertRaises(ValidationError):
            user_service.make_admin(self.repo, '')

    def test_make_admin_unknown_email(self):
        with self.assertRaises(NotFoundError) as ctx:
            user_service.make_admin(self.repo, 'ghost@example.com')
        self.assertEqual(str(ctx.exception), 'User not found with this email.')


class TestTrackActivity(UserServiceTestCase):

    def test_logs_activity_and_touches_user(self):
        activity = activity_service.track_activity(
            self.repo, self.activities, self.user.id, ip='9.9.9.9', device='Edge',
            type='PAGE_VIEW', page_route='/products', duration_ms=1200,
        )

        self.assertEqual(activity.page_route, '/products')
        stored = self.repo.get_by_id(self.user.id)
        self.assertEqual(stored.current_ip, '9.9.9.9')
        self.assertEqual(stored.current_device, 'Edge')
        self.assertEqual(len(self.activities.find_by_user(self.user.id)), 1)

    def test_heartbeat_only_touches_user(self):
        result = activity_service.track_activity(
            self.repo, self.activities, self.user.id, ip='9.9.9.9', device='Edge',
        )

        self.assertIsNone(result)
        self.assertEqual(self.activities.find_by_user(self.user.id), [])
