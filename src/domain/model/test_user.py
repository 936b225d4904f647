"""Unit tests for User domain model — session list rules and activity status.

Tests focus on behavior other components rely on:
- add_session trims from the front (oldest login goes first)
- remove_session / prune_sessions report what they removed
- session_status uses the 10 minute activity window
"""

import unittest
from datetime import datetime, timedelta, timezone

from domain.model.user import MAX_SESSIONS, Role, Session, User


def _session(n: int) -> Session:
    return Session(
        session_id=f's{n}',
        login_time=datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=n),
        device=f'device-{n}',
        ip=f'10.0.0.{n}',
    )


def _user(**kwargs) -> User:
    now = datetime.now(timezone.utc)
    defaults = dict(
        id='u1',
        first_name='Ada',
        username='ada',
        email='ada@example.com',
        created_at=now,
        updated_at=now,
    )
    defaults.update(kwargs)
    return User(**defaults)


class TestSessionCreate(unittest.TestCase):

    def test_create_assigns_unique_ids_and_utc_time(self):
        a = Session.create(device='Firefox', ip='1.2.3.4')
        b = Session.create(device='Firefox', ip='1.2.3.4')

        self.assertNotEqual(a.session_id, b.session_id)
        self.assertEqual(a.login_time.tzinfo, timezone.utc)
        self.assertEqual(a.device, 'Firefox')
        self.assertEqual(a.ip, '1.2.3.4')


class TestAddSession(unittest.TestCase):

    def test_add_below_limit_evicts_nothing(self):
        user = _user()
        for n in range(MAX_SESSIONS):
            self.assertEqual(user.add_session(_session(n)), [])
        self.assertEqual(len(user.sessions), MAX_SESSIONS)

    def test_sixth_session_evicts_the_oldest(self):
        """Cap is 5: the sixth login pushes out the first one."""
        user = _user()
        for n in range(MAX_SESSIONS):
            user.add_session(_session(n))

        evicted = user.add_session(_session(99))

        self.assertEqual([s.session_id for s in evicted], ['s0'])
        self.assertEqual([s.session_id for s in user.sessions], ['s1', 's2', 's3', 's4', 's99'])

    def test_custom_limit_trims_several(self):
        user = _user(sessions=[_session(n) for n in range(4)])

        evicted = user.add_session(_session(4), limit=2)

        self.assertEqual(len(evicted), 3)
        self.assertEqual([s.session_id for s in user.sessions], ['s3', 's4'])


class TestRemoveAndPrune(unittest.TestCase):

    def setUp(self):
        self.user = _user(sessions=[_session(n) for n in range(3)])

    def test_has_session(self):
        self.assertTrue(self.user.has_session('s1'))
        self.assertFalse(self.user.has_session('nope'))
        self.assertEqual(self.user.find_session('s2').device, 'device-2')

    def test_remove_session_returns_true_when_removed(self):
        self.assertTrue(self.user.remove_session('s1'))
        self.assertFalse(self.user.has_session('s1'))
        self.assertEqual(len(self.user.sessions), 2)

    def test_remove_unknown_session_returns_false(self):
        self.assertFalse(self.user.remove_session('missing'))
        self.assertEqual(len(self.user.sessions), 3)

    def test_prune_keeps_only_given_session(self):
        removed = self.user.prune_sessions('s2')

        self.assertEqual(removed, 2)
        self.assertEqual([s.session_id for s in self.user.sessions], ['s2'])

    def test_prune_with_unknown_id_clears_all(self):
        self.assertEqual(self.user.prune_sessions('ghost'), 3)
        self.assertEqual(self.user.sessions, [])


class TestSessionStatus(unittest.TestCase):

    def test_recent_activity_is_active(self):
        now = datetime.now(timezone.utc)
        user = _user(last_activity=now - timedelta(minutes=9))
        self.assertEqual(user.session_status(now), 'Active')

    def test_old_activity_is_inactive(self):
        now = datetime.now(timezone.utc)
        user = _user(last_activity=now - timedelta(minutes=11))
        self.assertEqual(user.session_status(now), 'Inactive')

    def test_falls_back_to_created_at(self):
        now = datetime.now(timezone.utc)
        user = _user(created_at=now - timedelta(hours=1), last_activity=None)
        self.assertEqual(user.session_status(now), 'Inactive')

    def test_naive_datetimes_are_treated_as_utc(self):
        now = datetime.now(timezone.utc)
        naive = (now - timedelta(minutes=1)).replace(tzinfo=None)
        user = _user(last_activity=naive)
        self.assertEqual(user.session_status(now), 'Active')


class TestRole(unittest.TestCase):

    def test_role_is_string_enum(self):
        self.assertEqual(Role.ADMIN, 'admin')
        self.assertEqual(Role('user'), Role.USER)

    def test_is_admin(self):
        self.assertTrue(_user(role=Role.ADMIN).is_admin)
        self.assertFalse(_user().is_admin)
