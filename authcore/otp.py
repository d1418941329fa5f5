"""Generation and checking of short-lived one-time codes."""

import hmac
import secrets
import string
from datetime import datetime, timedelta
from typing import Optional

from .domain import OneTimeCode, now


class OTPGenerator(object):
    """
    Produces fixed-length codes from a cryptographically secure source.

    The generator holds no state between calls; persisting the code and its
    issuance time is up to the caller.
    """

    def __init__(self, length: int = 6, expires_in: int = 600,
                 alphabet: str = string.digits) -> None:
        if length < 1:
            raise ValueError('Code length must be positive')
        self._length = length
        self._expires_in = expires_in
        self._alphabet = alphabet

    @property
    def expires_in(self) -> timedelta:
        """How long a code remains valid after issuance."""
        return timedelta(seconds=self._expires_in)

    def generate(self) -> OneTimeCode:
        """Generate a new code, stamped with the current time."""
        code = ''.join(secrets.choice(self._alphabet)
                       for _ in range(self._length))
        return OneTimeCode(code=code, issued_at=now())

    def is_expired(self, issued_at: Optional[datetime],
                   at: Optional[datetime] = None) -> bool:
        """A code with no issuance time is treated as expired."""
        if issued_at is None:
            return True
        return (at or now()) >= issued_at + self.expires_in

    def check(self, stored: Optional[str], issued_at: Optional[datetime],
              presented: Optional[str]) -> bool:
        """Whether ``presented`` matches a stored, unexpired code."""
        if not stored or not presented:
            return False
        if self.is_expired(issued_at):
            return False
        return hmac.compare_digest(stored.encode('utf-8'),
                                   presented.encode('utf-8'))
