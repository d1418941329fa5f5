"""Tests for :mod:`authcore.config`."""

from unittest import TestCase

from authcore import config


class TestLoad(TestCase):
    """Tests for :func:`config.load`."""

    def test_defaults(self):
        """With an empty environment, defaults apply and no key is set."""
        settings = config.load({})
        self.assertIsNone(settings.jwt_secret)
        self.assertEqual(settings.access_token_expires_in, 900)
        self.assertEqual(settings.refresh_token_expires_in, 604800)
        self.assertFalse(settings.rotate_refresh_tokens)
        self.assertEqual(settings.otp_length, 6)

    def test_from_environment(self):
        settings = config.load({
            'JWT_SECRET': 'foosecret',
            'ACCESS_TOKEN_EXPIRES_IN': '60',
            'REFRESH_TOKEN_EXPIRES_IN': '120',
            'ROTATE_REFRESH_TOKENS': '1',
            'OTP_LENGTH': '8',
            'OTP_EXPIRES_IN': '300',
            'DEPENDENCY_TIMEOUT': '0.5',
            'ACCOUNT_DATABASE_URI': 'sqlite://',
            'SMTP_PORT': '2525',
            'APP_NAME': 'Foo',
        })
        self.assertEqual(settings.jwt_secret, 'foosecret')
        self.assertEqual(settings.access_token_expires_in, 60)
        self.assertEqual(settings.refresh_token_expires_in, 120)
        self.assertTrue(settings.rotate_refresh_tokens)
        self.assertEqual(settings.otp_length, 8)
        self.assertEqual(settings.otp_expires_in, 300)
        self.assertEqual(settings.dependency_timeout, 0.5)
        self.assertEqual(settings.database_uri, 'sqlite://')
        self.assertEqual(settings.smtp_port, 2525)
        self.assertEqual(settings.app_name, 'Foo')

    def test_empty_secret(self):
        """An empty secret counts as no secret."""
        self.assertIsNone(config.load({'JWT_SECRET': ''}).jwt_secret)
