"""Defines the core data structures for the authentication core."""

from typing import Any, Optional, NamedTuple
from datetime import datetime

from pytz import UTC


def now() -> datetime:
    """Get the current time, timezone-aware in UTC."""
    return datetime.now(tz=UTC)


class Account(NamedTuple):
    """Represents one user identity."""

    email: str
    """The user's email address. Unique across all accounts."""

    name: str
    """Display name."""

    account_id: Optional[str] = None
    """Stable identifier. If ``None``, the account has not been stored."""

    password_hash: Optional[str] = None
    """Digest from :mod:`authcore.passwords`. ``None`` for OAuth accounts."""

    verified: bool = False
    """Whether the email address has been verified (OTP or OAuth provider)."""

    otp: Optional[str] = None
    """The outstanding one-time code, if any."""

    otp_issued_at: Optional[datetime] = None
    """When :attr:`otp` was issued."""

    refresh_token: Optional[str] = None
    """The single refresh token currently valid for this account."""

    provider_id: Optional[str] = None
    """Identifier of the linked OAuth provider identity."""

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    version: int = 0
    """Optimistic concurrency version, incremented by the store on update."""

    @property
    def has_password(self) -> bool:
        """Pure OAuth accounts carry no password hash."""
        return self.password_hash is not None


class OneTimeCode(NamedTuple):
    """A freshly generated verification or reset code."""

    code: str
    issued_at: datetime


class TokenPair(NamedTuple):
    """Access and refresh tokens issued together."""

    access_token: str
    refresh_token: str


class ProviderProfile(NamedTuple):
    """An already-authenticated profile handed over by an OAuth provider."""

    email: str
    given_name: str
    family_name: Optional[str] = None
    provider_id: Optional[str] = None
    email_verified: bool = False

    @property
    def display_name(self) -> str:
        """Given name, followed by the family name when the provider has one."""
        if self.family_name:
            return f'{self.given_name} {self.family_name}'
        return self.given_name


class AuthResult(NamedTuple):
    """Outcome of a successful orchestrator operation."""

    message: str
    status: int
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    account: Optional[Account] = None
    notified: Optional[bool] = None
    """``False`` if the outbound email could not be dispatched."""


# Helpers and private functions.


def to_dict(obj: tuple) -> dict:
    """
    Generate a dict representation of a NamedTuple instance.

    This just uses the built-in ``_asdict`` method on the intance, but also
    calls this on any child NamedTuple instances (recursively) so that the
    entire tree is cast to ``dict``. Datetimes become ISO-8601 strings.

    Parameters
    ----------
    obj : tuple
        A NamedTuple instance.

    Returns
    -------
    dict

    """
    if not hasattr(obj, '_asdict'):  # NamedTuple-generated classes have this.
        return {}
    data = obj._asdict()  # type: ignore
    _data = {}

    def _cast(obj: Any) -> Any:
        if hasattr(obj, '_asdict'):
            obj = to_dict(obj)
        elif isinstance(obj, datetime):
            obj = obj.isoformat()
        elif isinstance(obj, list):
            obj = [_cast(o) for o in obj]
        return obj

    for key, value in data.items():
        _data[key] = _cast(value)
    return _data


def public_account(account: Account) -> dict:
    """Dict representation of an account with secrets removed."""
    data = to_dict(account)
    for secret in ('password_hash', 'otp', 'otp_issued_at', 'refresh_token'):
        data.pop(secret, None)
    return data
