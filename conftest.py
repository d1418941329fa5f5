"""Shared pytest fixtures.

Fixtures defined here are available to all tests below this directory.
"""
from unittest import mock

import pytest

from authcore.config import Settings
from authcore.otp import OTPGenerator
from authcore.orchestrator import AuthOrchestrator
from authcore.passwords import PasswordHasher
from authcore.services.accounts import SQLAccountStore
from authcore.services.accounts.memory import InMemoryAccountStore
from authcore.services.notifications import Notifier
from authcore.tokens import TokenIssuer


@pytest.fixture()
def settings():
    return Settings(jwt_secret='foosecret', dependency_timeout=2.0)


@pytest.fixture()
def sql_store(tmp_path):
    store = SQLAccountStore.from_uri(f'sqlite:///{tmp_path}/test.db')
    store.create_all()
    yield store
    store.drop_all()


@pytest.fixture(params=['memory', 'sql'])
def store(request):
    if request.param == 'sql':
        return request.getfixturevalue('sql_store')
    return InMemoryAccountStore()


@pytest.fixture()
def notifier():
    return mock.MagicMock(spec=Notifier)


@pytest.fixture()
def orchestrator(settings, store, notifier):
    orchestrator = AuthOrchestrator(
        store=store,
        hasher=PasswordHasher(iterations=1000),
        otp=OTPGenerator(length=settings.otp_length,
                         expires_in=settings.otp_expires_in),
        tokens=TokenIssuer(settings),
        notifier=notifier,
        settings=settings
    )
    yield orchestrator
    orchestrator.close()
