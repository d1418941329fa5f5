"""Exceptions raised by the authentication core."""

from typing import Optional


class AuthError(RuntimeError):
    """Base class for failures that the boundary layer maps to a response."""

    code = 'auth_error'


class DuplicateAccount(AuthError):
    """An account with the same email or name already exists."""

    code = 'duplicate_account'

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class AccountNotFound(AuthError):
    """No account matches the lookup."""

    code = 'account_not_found'


class InvalidCredentials(AuthError):
    """Password is not correct."""

    code = 'invalid_credentials'


class InvalidOtp(AuthError):
    """Verification code is absent, expired, or does not match."""

    code = 'invalid_otp'


class InvalidResetCode(AuthError):
    """Password reset code is absent, expired, or does not match."""

    code = 'invalid_reset_code'


class MissingToken(AuthError):
    """No refresh token was presented."""

    code = 'missing_token'


class InvalidToken(AuthError):
    """Token signature or format is invalid."""

    code = 'invalid_token'


class ExpiredTokenError(AuthError):
    """Token is past its expiry."""

    code = 'expired_token'


class SigningError(AuthError):
    """Signing key is unavailable or signing failed."""

    code = 'signing_error'


class ProviderAuthFailed(AuthError):
    """The OAuth provider did not yield an authenticated profile."""

    code = 'provider_auth_failed'


class DependencyTimeout(AuthError):
    """A store or notification call exceeded its time bound."""

    code = 'dependency_timeout'


class NotificationFailed(AuthError):
    """Outbound email could not be dispatched."""

    code = 'notification_failed'


class ConcurrentUpdate(AuthError):
    """The stored account changed since it was read."""

    code = 'concurrent_update'
