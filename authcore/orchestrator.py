"""
Coordinates signup, login, email verification, token refresh, OAuth linking
and password recovery.

The :class:`AuthOrchestrator` is the only component that mutates account
state. Each public method is a self-contained unit of work: it reads the
account from the store, applies its changes to an immutable
:class:`.Account`, and writes the full record back in a single
:meth:`.AccountStore.update` call. Stores reject the write with
:class:`.ConcurrentUpdate` if another request changed the account in the
meantime; the orchestrator does not retry.

Every call to the store or the notifier is bounded by a timeout (see
:mod:`authcore.timeouts`). Callers may pass ``timeout`` to any operation;
otherwise :attr:`.Settings.dependency_timeout` applies.

Verification state only moves forward, from unverified to verified. An
account's one-time code is pending from issuance until it is used, replaced
by a newer code, or expires.
"""

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from http import HTTPStatus
from typing import Any, Callable, Optional

from .config import Settings
from .domain import Account, AuthResult, ProviderProfile, now
from .exceptions import AccountNotFound, DependencyTimeout, \
    DuplicateAccount, InvalidCredentials, InvalidOtp, InvalidResetCode, \
    MissingToken, NotificationFailed, ProviderAuthFailed
from .otp import OTPGenerator
from .passwords import PasswordHasher
from .services.accounts import AccountStore
from .services.notifications import Notifier
from .timeouts import bounded
from .tokens import REFRESH, TokenIssuer

logger = logging.getLogger(__name__)


class AuthOrchestrator(object):
    """Owns the account state machine and its invariants."""

    def __init__(self, store: AccountStore, hasher: PasswordHasher,
                 otp: OTPGenerator, tokens: TokenIssuer, notifier: Notifier,
                 settings: Optional[Settings] = None,
                 executor: Optional[Executor] = None) -> None:
        settings = settings or Settings()
        self._store = store
        self._hasher = hasher
        self._otp = otp
        self._tokens = tokens
        self._notifier = notifier
        self._timeout = settings.dependency_timeout
        self._rotate_refresh = settings.rotate_refresh_tokens
        self._app_name = settings.app_name
        self._executor = executor or ThreadPoolExecutor(
            thread_name_prefix='authcore'
        )

    def close(self) -> None:
        """Release worker threads. Calls still in flight are abandoned."""
        self._executor.shutdown(wait=False)

    def __enter__(self) -> 'AuthOrchestrator':
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # Collaborator access.

    def _call(self, timeout: Optional[float], func: Callable,
              *args: Any) -> Any:
        return bounded(self._executor,
                       self._timeout if timeout is None else timeout,
                       func, *args)

    def _get(self, email: str, timeout: Optional[float]) -> Account:
        account: Optional[Account] = self._call(
            timeout, self._store.find_by_email, email
        )
        if account is None:
            logger.debug('No account for %s', email)
            raise AccountNotFound('Email Not Found')
        return account

    def _save(self, timeout: Optional[float], account: Account,
              **changes: Any) -> Account:
        saved: Account = self._call(
            timeout, self._store.update, account.account_id,
            account._replace(updated_at=now(), **changes)
        )
        return saved

    def _notify(self, timeout: Optional[float], send: Callable, email: str,
                code: str) -> bool:
        try:
            self._call(timeout, send, email, code)
        except (NotificationFailed, DependencyTimeout) as e:
            logger.warning('Could not notify %s: %s', email, e)
            return False
        return True

    # Operations.

    def signup(self, email: str, name: str, password: str, *,
               timeout: Optional[float] = None) -> AuthResult:
        """
        Register a new, unverified account and send it a verification code.

        The account is stored before any token referencing its identifier is
        issued.

        Raises
        ------
        :class:`DuplicateAccount`
            Raised if the email or the name is already in use. Nothing is
            created and no tokens are issued.
        :class:`SigningError`
            Raised if tokens cannot be signed. Nothing is created.

        """
        self._tokens.ensure_available()
        if self._call(timeout, self._store.find_by_email, email) is not None:
            raise DuplicateAccount('User Already Exist', field='email')
        if self._call(timeout, self._store.find_by_name, name) is not None:
            raise DuplicateAccount('User Already Exist', field='name')

        code = self._otp.generate()
        created_at = now()
        account: Account = self._call(timeout, self._store.create, Account(
            email=email,
            name=name,
            password_hash=self._hasher.hash(password),
            otp=code.code,
            otp_issued_at=code.issued_at,
            created_at=created_at,
            updated_at=created_at
        ))
        logger.info('Created account %s', account.account_id)

        pair = self._tokens.issue_pair(account)
        account = self._save(timeout, account,
                             refresh_token=pair.refresh_token)
        notified = self._notify(timeout, self._notifier.send_otp_email,
                                account.email, code.code)
        return AuthResult(
            message='User Created Successfully, We Sent Otp Please Verify '
                    'Email',
            status=HTTPStatus.CREATED,
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            account=account,
            notified=notified
        )

    def login(self, email: str, password: str, *,
              timeout: Optional[float] = None) -> AuthResult:
        """
        Authenticate with email and password, rotating the refresh token.

        Raises
        ------
        :class:`AccountNotFound`
        :class:`InvalidCredentials`
            Raised if the password does not match, or the account has no
            password (OAuth-only accounts).

        """
        account = self._get(email, timeout)
        if not account.has_password \
                or not self._hasher.verify(password, account.password_hash):
            logger.debug('Password check failed for %s', account.account_id)
            raise InvalidCredentials('Invalid Password')

        pair = self._tokens.issue_pair(account)
        account = self._save(timeout, account,
                             refresh_token=pair.refresh_token)
        return AuthResult(
            message='User Logged In Successfully',
            status=HTTPStatus.OK,
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            account=account
        )

    def verify_otp(self, email: str, code: str, *,
                   timeout: Optional[float] = None) -> AuthResult:
        """
        Consume the pending code and mark the account verified.

        A wrong code leaves the pending code in place.

        Raises
        ------
        :class:`AccountNotFound`
        :class:`InvalidOtp`
            Raised if there is no pending code, it has expired, or it does
            not match.

        """
        account = self._get(email, timeout)
        if not self._otp.check(account.otp, account.otp_issued_at, code):
            raise InvalidOtp('Invalid Otp')
        account = self._save(timeout, account, otp=None, otp_issued_at=None,
                             verified=True)
        logger.info('Verified account %s', account.account_id)
        return AuthResult(message='Otp Verified', status=HTTPStatus.OK,
                          account=account)

    def resend_otp(self, email: str, *,
                   timeout: Optional[float] = None) -> AuthResult:
        """Replace the pending code with a new one and send it."""
        account = self._get(email, timeout)
        code = self._otp.generate()
        account = self._save(timeout, account, otp=code.code,
                             otp_issued_at=code.issued_at)
        notified = self._notify(timeout, self._notifier.send_otp_email,
                                account.email, code.code)
        return AuthResult(message='Otp Sent', status=HTTPStatus.OK,
                          account=account, notified=notified)

    def refresh_token(self, presented: Optional[str], *,
                      timeout: Optional[float] = None) -> AuthResult:
        """
        Mint a new access token from the account's current refresh token.

        The refresh token itself is kept unless
        :attr:`.Settings.rotate_refresh_tokens` is set.

        Raises
        ------
        :class:`MissingToken`
        :class:`InvalidToken`
        :class:`ExpiredTokenError`
        :class:`AccountNotFound`
            Raised if no account currently holds ``presented``, e.g. because
            a later login replaced it.

        """
        if not presented:
            raise MissingToken('Refresh Token Not Found')
        self._tokens.verify(presented, token_type=REFRESH)
        account: Optional[Account] = self._call(
            timeout, self._store.find_by_refresh_token, presented
        )
        if account is None:
            raise AccountNotFound('Refresh token is not current')

        access_token = self._tokens.issue_access(account)
        refresh_token = None
        if self._rotate_refresh:
            refresh_token = self._tokens.issue_refresh()
            account = self._save(timeout, account,
                                 refresh_token=refresh_token)
        return AuthResult(message='Token Refreshed', status=HTTPStatus.OK,
                          access_token=access_token,
                          refresh_token=refresh_token,
                          account=account)

    def oauth_callback(self, profile: Optional[ProviderProfile], *,
                       timeout: Optional[float] = None) -> AuthResult:
        """
        Sign in with a profile already authenticated by an OAuth provider.

        A first sign-in creates a verified account with no password. Later
        sign-ins link the provider identity if the account has none yet, and
        mark the account verified if the provider vouches for the email.

        Raises
        ------
        :class:`ProviderAuthFailed`
            Raised if the provider did not yield a usable profile.
        :class:`SigningError`
            Raised if tokens cannot be signed. No account is created or
            changed.

        """
        if profile is None or not profile.email:
            raise ProviderAuthFailed('Provider login failed')
        self._tokens.ensure_available()

        existing: Optional[Account] = self._call(
            timeout, self._store.find_by_email, profile.email
        )
        if existing is None:
            created_at = now()
            account: Account = self._call(timeout, self._store.create, Account(
                email=profile.email,
                name=profile.display_name,
                verified=True,
                provider_id=profile.provider_id,
                created_at=created_at,
                updated_at=created_at
            ))
            logger.info('Created account %s from provider profile',
                        account.account_id)
            pair = self._tokens.issue_pair(account)
            account = self._save(timeout, account,
                                 refresh_token=pair.refresh_token)
            return AuthResult(
                message=f'Thanks {account.name} for registering with '
                        f'{self._app_name}',
                status=HTTPStatus.CREATED,
                access_token=pair.access_token,
                refresh_token=pair.refresh_token,
                account=account
            )

        account = existing
        if account.provider_id is None and profile.provider_id:
            account = account._replace(provider_id=profile.provider_id)
        if profile.email_verified and not account.verified:
            account = account._replace(verified=True)
        pair = self._tokens.issue_pair(account)
        account = self._save(timeout, account,
                             refresh_token=pair.refresh_token)
        return AuthResult(
            message=f'Welcome back {account.name} to {self._app_name}',
            status=HTTPStatus.OK,
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            account=account
        )

    def request_password_reset(self, email: str, *,
                               timeout: Optional[float] = None) -> AuthResult:
        """Store a reset code as the account's pending code and send it."""
        account = self._get(email, timeout)
        code = self._otp.generate()
        account = self._save(timeout, account, otp=code.code,
                             otp_issued_at=code.issued_at)
        notified = self._notify(timeout,
                                self._notifier.send_password_reset_email,
                                account.email, code.code)
        return AuthResult(message='Password Reset Code Sent To Your Email',
                          status=HTTPStatus.OK, account=account,
                          notified=notified)

    def reset_password(self, email: str, code: str, password: str, *,
                       timeout: Optional[float] = None) -> AuthResult:
        """
        Set a new password using the pending reset code.

        Raises
        ------
        :class:`AccountNotFound`
        :class:`InvalidResetCode`
            Raised if there is no pending code, it has expired, or it does
            not match.

        """
        account = self._get(email, timeout)
        if not self._otp.check(account.otp, account.otp_issued_at, code):
            raise InvalidResetCode('Invalid Reset Code')
        account = self._save(timeout, account,
                             password_hash=self._hasher.hash(password),
                             otp=None, otp_issued_at=None)
        logger.info('Password reset for account %s', account.account_id)
        return AuthResult(message='Password Reset Successfully',
                          status=HTTPStatus.OK, account=account)
