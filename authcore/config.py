"""
Configuration for the authentication core.

Settings are read from the environment once, at process start, and passed
explicitly to the components that need them (see :mod:`authcore.factory`).
Nothing reads the environment after :func:`load` returns.
"""

import os
from typing import Mapping, NamedTuple, Optional


class Settings(NamedTuple):
    """Process-wide configuration."""

    jwt_secret: Optional[str] = None
    """Secret used to sign access and refresh tokens.

    If not set, token issuance fails with :class:`.SigningError`."""

    jwt_algorithm: str = 'HS256'

    access_token_expires_in: int = 900
    """Access token lifetime, in seconds."""

    refresh_token_expires_in: int = 604800
    """Refresh token lifetime, in seconds."""

    rotate_refresh_tokens: bool = False
    """Issue a new refresh token on every refresh, not only on login."""

    otp_length: int = 6
    otp_expires_in: int = 600
    """How long a verification or reset code stays valid, in seconds."""

    dependency_timeout: float = 5.0
    """Default bound on store and notification calls, in seconds."""

    database_uri: str = 'sqlite:///authcore.db'
    """SQLAlchemy URI for the account store."""

    smtp_host: str = 'localhost'
    smtp_port: int = 25
    mail_from: str = 'no-reply@localhost'

    app_name: str = 'TaskTresk'
    """Product name used in welcome messages."""

    loglevel: int = 20


def _flag(value: str) -> bool:
    return bool(int(value))


def load(environ: Mapping[str, str] = os.environ) -> Settings:
    """Build :class:`.Settings` from environment variables."""
    defaults = Settings()
    return Settings(
        jwt_secret=environ.get('JWT_SECRET') or None,
        jwt_algorithm=environ.get('JWT_ALGORITHM', defaults.jwt_algorithm),
        access_token_expires_in=int(environ.get(
            'ACCESS_TOKEN_EXPIRES_IN', defaults.access_token_expires_in
        )),
        refresh_token_expires_in=int(environ.get(
            'REFRESH_TOKEN_EXPIRES_IN', defaults.refresh_token_expires_in
        )),
        rotate_refresh_tokens=_flag(environ.get('ROTATE_REFRESH_TOKENS', '0')),
        otp_length=int(environ.get('OTP_LENGTH', defaults.otp_length)),
        otp_expires_in=int(environ.get('OTP_EXPIRES_IN',
                                       defaults.otp_expires_in)),
        dependency_timeout=float(environ.get('DEPENDENCY_TIMEOUT',
                                             defaults.dependency_timeout)),
        database_uri=environ.get('ACCOUNT_DATABASE_URI',
                                 defaults.database_uri),
        smtp_host=environ.get('SMTP_HOST', defaults.smtp_host),
        smtp_port=int(environ.get('SMTP_PORT', defaults.smtp_port)),
        mail_from=environ.get('MAIL_FROM', defaults.mail_from),
        app_name=environ.get('APP_NAME', defaults.app_name),
        loglevel=int(environ.get('LOGLEVEL', defaults.loglevel)),
    )
