"""Tests for :mod:`authcore.otp`."""

import string
from datetime import timedelta
from unittest import TestCase

from authcore.domain import now
from authcore.otp import OTPGenerator


class TestGenerate(TestCase):
    """Tests for :meth:`OTPGenerator.generate`."""

    def test_code_shape(self):
        """Codes are fixed-length strings of digits."""
        generator = OTPGenerator(length=6)
        for _ in range(50):
            otp = generator.generate()
            self.assertEqual(len(otp.code), 6)
            self.assertTrue(set(otp.code) <= set(string.digits))
            self.assertIsNotNone(otp.issued_at.tzinfo)

    def test_codes_vary(self):
        """Successive codes are not all the same."""
        generator = OTPGenerator(length=8)
        codes = {generator.generate().code for _ in range(20)}
        self.assertGreater(len(codes), 1)

    def test_custom_alphabet(self):
        generator = OTPGenerator(length=10, alphabet='AB')
        self.assertTrue(set(generator.generate().code) <= {'A', 'B'})

    def test_bad_length(self):
        with self.assertRaises(ValueError):
            OTPGenerator(length=0)


class TestCheck(TestCase):
    """Tests for :meth:`OTPGenerator.check`."""

    def setUp(self):
        self.generator = OTPGenerator(length=6, expires_in=600)
        self.otp = self.generator.generate()

    def test_matching_code(self):
        self.assertTrue(self.generator.check(self.otp.code,
                                             self.otp.issued_at,
                                             self.otp.code))

    def test_wrong_code(self):
        wrong = '0' * 7
        self.assertFalse(self.generator.check(self.otp.code,
                                              self.otp.issued_at, wrong))

    def test_no_stored_code(self):
        self.assertFalse(self.generator.check(None, None, '123456'))
        self.assertFalse(self.generator.check(self.otp.code,
                                              self.otp.issued_at, ''))

    def test_expired_code(self):
        """The code is rejected once its window has passed."""
        issued_at = now() - timedelta(seconds=601)
        self.assertTrue(self.generator.is_expired(issued_at))
        self.assertFalse(self.generator.check(self.otp.code, issued_at,
                                              self.otp.code))

    def test_missing_issue_time(self):
        """A code without an issuance time is treated as expired."""
        self.assertFalse(self.generator.check(self.otp.code, None,
                                              self.otp.code))
