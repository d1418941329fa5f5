"""Failure handling in :mod:`authcore.orchestrator`, with mocked parts."""

import time
from unittest import TestCase, mock

from authcore.config import Settings
from authcore.domain import ProviderProfile
from authcore.exceptions import AccountNotFound, ConcurrentUpdate, \
    DependencyTimeout, SigningError
from authcore.orchestrator import AuthOrchestrator
from authcore.otp import OTPGenerator
from authcore.passwords import PasswordHasher
from authcore.services.accounts import AccountStore
from authcore.services.accounts.memory import InMemoryAccountStore
from authcore.services.notifications import Notifier
from authcore.tokens import TokenIssuer


def _slow(*args, **kwargs):
    time.sleep(0.5)


class OrchestratorMixin(object):
    """Builds an orchestrator around an in-memory store."""

    settings = Settings(jwt_secret='foosecret', dependency_timeout=2.0)

    def setUp(self):
        self.store = InMemoryAccountStore()
        self.notifier = mock.MagicMock(spec=Notifier)
        self.orchestrator = self._orchestrator(self.settings, self.store)

    def tearDown(self):
        self.orchestrator.close()

    def _orchestrator(self, settings, store):
        return AuthOrchestrator(store=store,
                                hasher=PasswordHasher(iterations=1000),
                                otp=OTPGenerator(),
                                tokens=TokenIssuer(settings),
                                notifier=self.notifier,
                                settings=settings)


class TestTimeouts(OrchestratorMixin, TestCase):
    """Slow collaborators surface as :class:`.DependencyTimeout`."""

    def test_slow_store(self):
        store = mock.MagicMock(spec=AccountStore)
        store.find_by_email.side_effect = _slow
        with self._orchestrator(self.settings, store) as orchestrator:
            with self.assertRaises(DependencyTimeout):
                orchestrator.login('a@x.com', 'pw123', timeout=0.05)

    def test_default_timeout_from_settings(self):
        store = mock.MagicMock(spec=AccountStore)
        store.find_by_email.side_effect = _slow
        settings = self.settings._replace(dependency_timeout=0.05)
        with self._orchestrator(settings, store) as orchestrator:
            with self.assertRaises(DependencyTimeout):
                orchestrator.resend_otp('a@x.com')

    def test_slow_notifier(self):
        """A slow email is reported, but the signup stands."""
        self.notifier.send_otp_email.side_effect = _slow
        result = self.orchestrator.signup('a@x.com', 'Ann', 'pw123',
                                          timeout=0.2)
        self.assertFalse(result.notified)
        self.assertIsNotNone(self.store.find_by_email('a@x.com'))


class TestSigningUnavailable(OrchestratorMixin, TestCase):
    """Without a signing key, no tokens are issued and nothing is stored."""

    settings = Settings(jwt_secret=None)

    def test_signup(self):
        with self.assertRaises(SigningError):
            self.orchestrator.signup('a@x.com', 'Ann', 'pw123')
        self.assertIsNone(self.store.find_by_email('a@x.com'))
        self.notifier.send_otp_email.assert_not_called()

    def test_signup_can_be_retried(self):
        """Once a key is configured, the same signup goes through."""
        with self.assertRaises(SigningError):
            self.orchestrator.signup('a@x.com', 'Ann', 'pw123')
        settings = Settings(jwt_secret='foosecret')
        with self._orchestrator(settings, self.store) as orchestrator:
            result = orchestrator.signup('a@x.com', 'Ann', 'pw123')
        self.assertIsNotNone(result.access_token)
        self.assertEqual(self.store.find_by_email('a@x.com').refresh_token,
                         result.refresh_token)

    def test_oauth_callback(self):
        with self.assertRaises(SigningError):
            self.orchestrator.oauth_callback(ProviderProfile('a@x.com', 'Ann'))
        self.assertIsNone(self.store.find_by_email('a@x.com'))


class TestConcurrentUpdate(OrchestratorMixin, TestCase):
    """Racing writes to one account are rejected, not lost."""

    def test_stale_write(self):
        self.orchestrator.signup('a@x.com', 'Ann', 'pw123')
        stale = self.store.find_by_email('a@x.com')
        self.orchestrator.resend_otp('a@x.com')

        with mock.patch.object(self.store, 'find_by_email',
                               return_value=stale):
            with self.assertRaises(ConcurrentUpdate):
                self.orchestrator.verify_otp('a@x.com', stale.otp)
        self.assertFalse(self.store.find_by_email('a@x.com').verified)


class TestRotation(OrchestratorMixin, TestCase):
    """With rotation enabled, refreshing replaces the refresh token."""

    settings = Settings(jwt_secret='foosecret', rotate_refresh_tokens=True)

    def test_refresh_rotates(self):
        signup = self.orchestrator.signup('a@x.com', 'Ann', 'pw123')
        result = self.orchestrator.refresh_token(signup.refresh_token)
        self.assertIsNotNone(result.refresh_token)
        self.assertNotEqual(result.refresh_token, signup.refresh_token)
        self.assertEqual(self.store.find_by_email('a@x.com').refresh_token,
                         result.refresh_token)
        self.assertIsNotNone(
            self.orchestrator.refresh_token(result.refresh_token).access_token
        )


class TestUnknownEmail(OrchestratorMixin, TestCase):
    """Lookups never create accounts."""

    def test_no_side_effects(self):
        for operation in [self.orchestrator.resend_otp,
                          self.orchestrator.request_password_reset]:
            with self.assertRaises(AccountNotFound):
                operation('nobody@x.com')
        self.assertIsNone(self.store.find_by_email('nobody@x.com'))
        self.notifier.send_otp_email.assert_not_called()
        self.notifier.send_password_reset_email.assert_not_called()
