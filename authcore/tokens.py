"""Functions for issuing and validating signed session tokens."""

import logging
import secrets
from datetime import timedelta
from typing import Optional

import jwt

from .config import Settings
from .domain import Account, TokenPair, now
from .exceptions import SigningError, InvalidToken, ExpiredTokenError

logger = logging.getLogger(__name__)

ACCESS = 'access'
REFRESH = 'refresh'


class TokenIssuer(object):
    """
    Signs and verifies JWTs with the process-wide secret.

    Access and refresh tokens use the same mechanism. They differ in their
    claims (refresh tokens carry only a random ``jti``) and their lifetimes.
    """

    def __init__(self, settings: Settings) -> None:
        self._secret = settings.jwt_secret
        self._algorithm = settings.jwt_algorithm
        self._access_ttl = settings.access_token_expires_in
        self._refresh_ttl = settings.refresh_token_expires_in

    def ensure_available(self) -> None:
        """
        Check that tokens can be signed before committing to any change.

        Raises
        ------
        :class:`SigningError`
            Raised if no signing secret is configured.

        """
        if not self._secret:
            raise SigningError('Signing key is not available')

    def issue(self, claims: dict, ttl: int) -> str:
        """
        Sign ``claims``, adding an expiry ``ttl`` seconds from now.

        Raises
        ------
        :class:`SigningError`
            Raised if no signing secret is configured, or signing fails.

        """
        self.ensure_available()
        issued_at = now()
        payload = dict(claims, iat=issued_at,
                       exp=issued_at + timedelta(seconds=ttl))
        try:
            return jwt.encode(payload, self._secret, algorithm=self._algorithm)
        except (jwt.exceptions.PyJWTError, NotImplementedError, TypeError,
                ValueError) as e:
            raise SigningError(f'Could not sign token: {e}') from e

    def verify(self, token: str, token_type: Optional[str] = None) -> dict:
        """
        Decode a token and return its claims.

        Parameters
        ----------
        token : str
        token_type : str
            If given, the ``typ`` claim must match (``access`` or
            ``refresh``).

        Raises
        ------
        :class:`ExpiredTokenError`
            Raised if the token is past its expiry.
        :class:`InvalidToken`
            Raised if the signature or format is invalid.

        """
        self.ensure_available()
        try:
            claims = dict(jwt.decode(token, self._secret,
                                     algorithms=[self._algorithm]))
        except jwt.exceptions.ExpiredSignatureError as e:
            raise ExpiredTokenError('Token has expired') from e
        except jwt.exceptions.InvalidTokenError as e:
            raise InvalidToken('Not a valid token') from e
        if token_type is not None and claims.get('typ') != token_type:
            raise InvalidToken(f'Not an {token_type} token'
                               if token_type == ACCESS
                               else f'Not a {token_type} token')
        return claims

    def issue_access(self, account: Account) -> str:
        """Issue an access token carrying the account's identity claims."""
        return self.issue({
            'typ': ACCESS,
            'email': account.email,
            'verified': account.verified,
            'account_id': account.account_id,
        }, self._access_ttl)

    def issue_refresh(self) -> str:
        """Issue a refresh token. It is unlinkable; the store maps it back."""
        return self.issue({'typ': REFRESH, 'jti': secrets.token_urlsafe(16)},
                          self._refresh_ttl)

    def issue_pair(self, account: Account) -> TokenPair:
        """Issue a fresh access and refresh token for ``account``."""
        return TokenPair(access_token=self.issue_access(account),
                         refresh_token=self.issue_refresh())
