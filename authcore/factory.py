"""Composition of the authentication core from its parts."""

import logging
from typing import Optional

from . import config
from .app_logging import setup_logger
from .config import Settings
from .orchestrator import AuthOrchestrator
from .otp import OTPGenerator
from .passwords import PasswordHasher
from .services.accounts import AccountStore, SQLAccountStore
from .services.notifications import Notifier, SMTPNotifier
from .tokens import TokenIssuer

logger = logging.getLogger(__name__)


def create_store(settings: Settings) -> SQLAccountStore:
    """Connect to the account database, creating tables if needed."""
    store = SQLAccountStore.from_uri(settings.database_uri)
    store.create_all()
    return store


def create_notifier(settings: Settings) -> SMTPNotifier:
    """Get a notifier for the configured SMTP relay."""
    return SMTPNotifier(host=settings.smtp_host, port=settings.smtp_port,
                        sender=settings.mail_from,
                        timeout=settings.dependency_timeout)


def create_orchestrator(settings: Optional[Settings] = None,
                        store: Optional[AccountStore] = None,
                        notifier: Optional[Notifier] = None,
                        configure_logging: bool = False) -> AuthOrchestrator:
    """
    Build an :class:`.AuthOrchestrator` and its collaborators.

    Parameters
    ----------
    settings : :class:`.Settings`
        If not given, settings are loaded from the environment.
    store : :class:`.AccountStore`
        Defaults to a :class:`.SQLAccountStore` on
        :attr:`.Settings.database_uri`.
    notifier : :class:`.Notifier`
        Defaults to an :class:`.SMTPNotifier`.
    configure_logging : bool
        Install the JSON log handler at :attr:`.Settings.loglevel`.

    """
    if settings is None:
        settings = config.load()
    if configure_logging:
        setup_logger(settings.loglevel)
    if not settings.jwt_secret:
        logger.warning('JWT_SECRET is not set; tokens cannot be issued')
    return AuthOrchestrator(
        store=store if store is not None else create_store(settings),
        hasher=PasswordHasher(),
        otp=OTPGenerator(length=settings.otp_length,
                         expires_in=settings.otp_expires_in),
        tokens=TokenIssuer(settings),
        notifier=notifier if notifier is not None
        else create_notifier(settings),
        settings=settings
    )
