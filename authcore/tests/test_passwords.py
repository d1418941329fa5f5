"""Tests for :mod:`authcore.passwords`."""

import string
from unittest import TestCase

from hypothesis import given, settings
from hypothesis import strategies as st

from authcore.passwords import PasswordHasher


class TestHashPassword(TestCase):
    """Tests for :meth:`PasswordHasher.hash`."""

    def setUp(self):
        self.hasher = PasswordHasher(iterations=1000)

    def test_digest_is_salted(self):
        """Hashing the same password twice gives different digests."""
        self.assertNotEqual(self.hasher.hash('thepassword'),
                            self.hasher.hash('thepassword'))

    def test_digest_does_not_contain_password(self):
        digest = self.hasher.hash('thepassword')
        self.assertNotIn('thepassword', digest)
        self.assertTrue(digest.startswith('pbkdf2_sha256$1000$'))


class TestCheckPassword(TestCase):
    """Tests for :meth:`PasswordHasher.verify`."""

    hasher = PasswordHasher(iterations=100)

    @given(st.text(alphabet=string.printable))
    @settings(max_examples=200, deadline=None)
    def test_check_passwords_successful(self, passw):
        self.assertTrue(self.hasher.verify(passw, self.hasher.hash(passw)),
                        f"should work for password '{passw}'")

    @given(st.text(alphabet=string.printable),
           st.text(alphabet=st.characters()))
    @settings(max_examples=500, deadline=None)
    def test_check_passwords_fuzz(self, passw, fuzzpw):
        digest = self.hasher.hash(passw)
        self.assertEqual(self.hasher.verify(fuzzpw, digest), passw == fuzzpw)

    def test_malformed_digest(self):
        """A digest that was not produced by the hasher never matches."""
        for digest in ['', 'notadigest', 'pbkdf2_sha256$abc$Zm9v',
                       'md5$1000$Zm9vYmFy', 'pbkdf2_sha256$1000$!!!!',
                       'pbkdf2_sha256$1000$Zm9v']:
            self.assertFalse(self.hasher.verify('foo', digest))

    def test_other_work_factor(self):
        """Digests made with a different iteration count still verify."""
        digest = PasswordHasher(iterations=50).hash('thepassword')
        self.assertTrue(self.hasher.verify('thepassword', digest))
        self.assertFalse(self.hasher.verify('thepasswerd', digest))
