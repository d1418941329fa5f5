"""One-way password hashing and verification."""

import hashlib
import hmac
import logging
import secrets
from base64 import b64encode, b64decode
from binascii import Error as DecodeError

logger = logging.getLogger(__name__)

ALGORITHM = 'pbkdf2_sha256'
SALT_BYTES = 16


def _derive(salt: bytes, password: str, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac('sha256',
                               password.encode('utf-8', 'surrogatepass'),
                               salt, iterations)


class PasswordHasher(object):
    """
    Salted PBKDF2 password hashing.

    Digests look like ``pbkdf2_sha256$<iterations>$<base64(salt + key)>`` so
    that the work factor can be raised without invalidating stored hashes.
    """

    def __init__(self, iterations: int = 260000) -> None:
        self._iterations = iterations

    def hash(self, password: str) -> str:
        """Generate a secure hash of a password."""
        salt = secrets.token_bytes(SALT_BYTES)
        hashed = _derive(salt, password, self._iterations)
        encoded = b64encode(salt + hashed).decode('ascii')
        return f'{ALGORITHM}${self._iterations}${encoded}'

    def verify(self, password: str, digest: str) -> bool:
        """Check a password against a digest produced by :meth:`hash`."""
        try:
            algorithm, iterations, encoded = digest.split('$')
            decoded = b64decode(encoded.encode('ascii'), validate=True)
            rounds = int(iterations)
        except (ValueError, DecodeError, UnicodeEncodeError):
            logger.debug('Password digest is malformed')
            return False
        if algorithm != ALGORITHM or len(decoded) <= SALT_BYTES:
            return False
        salt, enc_hashed = decoded[:SALT_BYTES], decoded[SALT_BYTES:]
        return hmac.compare_digest(_derive(salt, password, rounds), enc_hashed)
