"""
Request handling for the authentication operations.

Each controller takes already-parsed request data, calls the
:class:`.AuthOrchestrator`, and returns a tuple of response body, status code
and response headers. The web layer only has to serialize these. Failures
are mapped by their kind, never by their message.
"""

import logging
from http import HTTPStatus
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Type

from .domain import AuthResult, ProviderProfile, public_account
from .exceptions import AuthError, AccountNotFound, ConcurrentUpdate, \
    DependencyTimeout, DuplicateAccount, ExpiredTokenError, \
    InvalidCredentials, InvalidOtp, InvalidResetCode, InvalidToken, \
    MissingToken, ProviderAuthFailed, SigningError
from .orchestrator import AuthOrchestrator

logger = logging.getLogger(__name__)

ResponseData = Tuple[dict, int, dict]

ACCESS_TOKEN_HEADER = 'Token'
REFRESH_TOKEN_HEADER = 'RefreshToken'

STATUSES: List[Tuple[Type[AuthError], int]] = [
    (DuplicateAccount, HTTPStatus.CONFLICT),
    (AccountNotFound, HTTPStatus.NOT_FOUND),
    (InvalidCredentials, HTTPStatus.UNAUTHORIZED),
    (InvalidOtp, HTTPStatus.BAD_REQUEST),
    (InvalidResetCode, HTTPStatus.BAD_REQUEST),
    (MissingToken, HTTPStatus.BAD_REQUEST),
    (InvalidToken, HTTPStatus.UNAUTHORIZED),
    (ExpiredTokenError, HTTPStatus.UNAUTHORIZED),
    (ProviderAuthFailed, HTTPStatus.UNAUTHORIZED),
    (ConcurrentUpdate, HTTPStatus.CONFLICT),
    (SigningError, HTTPStatus.INTERNAL_SERVER_ERROR),
    (DependencyTimeout, HTTPStatus.GATEWAY_TIMEOUT),
]
"""Response status for each kind of failure."""


def status_for(error: AuthError) -> int:
    """Get the response status for a failure."""
    for kind, status in STATUSES:
        if isinstance(error, kind):
            return status
    return HTTPStatus.BAD_REQUEST


def error_response(error: AuthError) -> ResponseData:
    """Build the response for a failed operation."""
    status = status_for(error)
    if status >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error('%s failure: %s', error.code, error)
    return {'error': error.code, 'message': str(error)}, status, {}


def _missing(params: Mapping[str, Any], *fields: str) \
        -> Optional[ResponseData]:
    absent = [field for field in fields
              if field not in params or params[field] in (None, '')]
    if not absent:
        return None
    data = {'error': 'missing_field',
            'message': f'Missing required fields: {", ".join(absent)}'}
    return data, HTTPStatus.BAD_REQUEST, {}


def _code(params: Mapping[str, Any]) -> Optional[ResponseData]:
    # Codes may start with zero, which a number cannot carry.
    if isinstance(params['otp'], str):
        return None
    data = {'error': 'invalid_field',
            'message': 'The otp field must be a string'}
    return data, HTTPStatus.BAD_REQUEST, {}


def _response(result: AuthResult, **extra: Any) -> ResponseData:
    data: Dict[str, Any] = {'message': result.message}
    headers = {}
    if result.access_token:
        data['token'] = result.access_token
        headers[ACCESS_TOKEN_HEADER] = result.access_token
    if result.refresh_token:
        headers[REFRESH_TOKEN_HEADER] = result.refresh_token
    if result.notified is not None:
        data['notified'] = result.notified
    data.update(extra)
    return data, int(result.status), headers


def _handle(operation: Callable[..., AuthResult], *args: Any) \
        -> ResponseData:
    try:
        return _response(operation(*args))
    except AuthError as e:
        return error_response(e)


def signup(orchestrator: AuthOrchestrator,
           params: Mapping[str, Any]) -> ResponseData:
    """Register a new account."""
    missing = _missing(params, 'email', 'name', 'password')
    if missing:
        return missing
    return _handle(orchestrator.signup, params['email'], params['name'],
                   params['password'])


def login(orchestrator: AuthOrchestrator,
          params: Mapping[str, Any]) -> ResponseData:
    """
    Log in with email and password.

    An unknown email and a wrong password produce the same response, so that
    the response does not reveal which addresses have accounts.
    """
    missing = _missing(params, 'email', 'password')
    if missing:
        return missing
    try:
        result = orchestrator.login(params['email'], params['password'])
    except (AccountNotFound, InvalidCredentials) as e:
        logger.debug('Login failed: %s', e)
        data = {'error': InvalidCredentials.code,
                'message': 'Invalid email or password'}
        return data, HTTPStatus.UNAUTHORIZED, {}
    except AuthError as e:
        return error_response(e)
    return _response(result)


def verify_otp(orchestrator: AuthOrchestrator,
               params: Mapping[str, Any]) -> ResponseData:
    """
    Verify an email address with a one-time code.

    The ``otp`` parameter must be a string, as sent to the user.
    """
    invalid = _missing(params, 'email', 'otp') or _code(params)
    if invalid:
        return invalid
    return _handle(orchestrator.verify_otp, params['email'], params['otp'])


def resend_otp(orchestrator: AuthOrchestrator,
               params: Mapping[str, Any]) -> ResponseData:
    """Send a new one-time code."""
    missing = _missing(params, 'email')
    if missing:
        return missing
    return _handle(orchestrator.resend_otp, params['email'])


def refresh_token(orchestrator: AuthOrchestrator,
                  headers: Mapping[str, str]) -> ResponseData:
    """Get a new access token. The refresh token is read from the headers."""
    presented = None
    for key, value in headers.items():
        if key.lower() == REFRESH_TOKEN_HEADER.lower():
            presented = value
    return _handle(orchestrator.refresh_token, presented)


def oauth_callback(orchestrator: AuthOrchestrator,
                   profile: Optional[ProviderProfile]) -> ResponseData:
    """Complete a sign-in with a provider-authenticated profile."""
    try:
        result = orchestrator.oauth_callback(profile)
    except AuthError as e:
        return error_response(e)
    extra: Dict[str, Any] = {'statusCode': int(result.status)}
    if result.account is not None:
        extra['user'] = public_account(result.account)
    if result.status == HTTPStatus.CREATED:
        extra['refreshToken'] = result.refresh_token
    return _response(result, **extra)


def request_password_reset(orchestrator: AuthOrchestrator,
                           params: Mapping[str, Any]) -> ResponseData:
    """Send a password reset code."""
    missing = _missing(params, 'email')
    if missing:
        return missing
    return _handle(orchestrator.request_password_reset, params['email'])


def reset_password(orchestrator: AuthOrchestrator,
                   params: Mapping[str, Any]) -> ResponseData:
    """
    Set a new password with a reset code.

    The ``otp`` parameter must be a string, as sent to the user.
    """
    invalid = _missing(params, 'email', 'otp', 'password') or _code(params)
    if invalid:
        return invalid
    return _handle(orchestrator.reset_password, params['email'],
                   params['otp'], params['password'])
