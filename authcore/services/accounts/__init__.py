"""
Integration with the account datastore.

:class:`AccountStore` is the contract the orchestrator relies on. Two
implementations are provided: :class:`SQLAccountStore`, backed by any
database SQLAlchemy can talk to, and
:class:`.memory.InMemoryAccountStore` for tests and local development.

Updates are atomic per record and use optimistic versioning: an update is
applied only if the stored :attr:`.Account.version` still equals the version
that was read, otherwise :class:`.ConcurrentUpdate` is raised. This is what
keeps two racing requests on the same account from losing each other's
writes.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Generator, Optional

from pytz import UTC
from sqlalchemy import create_engine, select, update as sql_update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from ...domain import Account
from ...exceptions import AccountNotFound, ConcurrentUpdate, DuplicateAccount
from .models import Base, DBAccount

logger = logging.getLogger(__name__)

_FIELDS = ('email', 'name', 'password_hash', 'verified', 'otp',
           'otp_issued_at', 'refresh_token', 'provider_id', 'created_at',
           'updated_at')


class AccountStore(object):
    """Lookup, creation and update of account records."""

    def find_by_email(self, email: str) -> Optional[Account]:
        """Get the account registered with ``email``, if any."""
        raise NotImplementedError()

    def find_by_name(self, name: str) -> Optional[Account]:
        """Get an account with display name ``name``, if any."""
        raise NotImplementedError()

    def find_by_email_and_name(self, email: str,
                               name: str) -> Optional[Account]:
        """Get the account matching both ``email`` and ``name``, if any."""
        raise NotImplementedError()

    def find_by_refresh_token(self, token: str) -> Optional[Account]:
        """Get the account whose current refresh token is ``token``."""
        raise NotImplementedError()

    def create(self, account: Account) -> Account:
        """
        Store a new account, assigning its identifier.

        Raises
        ------
        :class:`DuplicateAccount`
            Raised if the email address is already registered.

        """
        raise NotImplementedError()

    def update(self, account_id: str, account: Account) -> Account:
        """
        Replace the full record for ``account_id``.

        Raises
        ------
        :class:`AccountNotFound`
            Raised if there is no such account.
        :class:`ConcurrentUpdate`
            Raised if the record changed since ``account`` was read.

        """
        raise NotImplementedError()


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # Some backends (sqlite) drop the timezone on the way back out.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _to_domain(db_account: DBAccount) -> Account:
    return Account(
        account_id=db_account.account_id,
        email=db_account.email,
        name=db_account.name,
        password_hash=db_account.password_hash,
        verified=bool(db_account.verified),
        otp=db_account.otp,
        otp_issued_at=_aware(db_account.otp_issued_at),
        refresh_token=db_account.refresh_token,
        provider_id=db_account.provider_id,
        created_at=_aware(db_account.created_at),
        updated_at=_aware(db_account.updated_at),
        version=db_account.version
    )


def _values(account: Account) -> dict:
    return {field: getattr(account, field) for field in _FIELDS}


class SQLAccountStore(AccountStore):
    """Account store backed by a relational database."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._sessionmaker = sessionmaker(bind=engine, expire_on_commit=False)

    @classmethod
    def from_uri(cls, uri: str) -> 'SQLAccountStore':
        """Create a store for a SQLAlchemy database URI."""
        connect_args = {}
        if uri.startswith('sqlite'):
            # Calls are made from the orchestrator's worker threads.
            connect_args = {'check_same_thread': False}
        return cls(create_engine(uri, connect_args=connect_args))

    def create_all(self) -> None:
        """Create all tables in the database."""
        Base.metadata.create_all(self._engine)

    def drop_all(self) -> None:
        """Drop all tables in the database."""
        Base.metadata.drop_all(self._engine)

    @contextmanager
    def transaction(self) -> Generator[Session, None, None]:
        """Context manager for database transaction."""
        session = self._sessionmaker()
        try:
            yield session
            session.commit()
        except Exception as e:
            logger.error('Commit failed, rolling back: %s', str(e))
            session.rollback()
            raise
        finally:
            session.close()

    def _find_one(self, *criteria: object) -> Optional[Account]:
        with self.transaction() as session:
            db_account = session.scalars(
                select(DBAccount).where(*criteria).limit(1)  # type: ignore
            ).first()
            if db_account is None:
                return None
            return _to_domain(db_account)

    def find_by_email(self, email: str) -> Optional[Account]:
        return self._find_one(DBAccount.email == email)

    def find_by_name(self, name: str) -> Optional[Account]:
        return self._find_one(DBAccount.name == name)

    def find_by_email_and_name(self, email: str,
                               name: str) -> Optional[Account]:
        return self._find_one(DBAccount.email == email,
                              DBAccount.name == name)

    def find_by_refresh_token(self, token: str) -> Optional[Account]:
        if not token:
            return None
        return self._find_one(DBAccount.refresh_token == token)

    def create(self, account: Account) -> Account:
        db_account = DBAccount(**_values(account), version=0)
        if account.account_id is not None:
            db_account.account_id = account.account_id
        try:
            with self.transaction() as session:
                session.add(db_account)
                session.flush()
                created = _to_domain(db_account)
        except IntegrityError as e:
            raise DuplicateAccount('Email is already registered',
                                   field='email') from e
        logger.debug('Created account %s', created.account_id)
        return created

    def update(self, account_id: str, account: Account) -> Account:
        try:
            with self.transaction() as session:
                result = session.execute(
                    sql_update(DBAccount)
                    .where(DBAccount.account_id == account_id,
                           DBAccount.version == account.version)
                    .values(**_values(account), version=account.version + 1)
                )
                updated = result.rowcount
        except IntegrityError as e:
            raise DuplicateAccount('Email is already registered',
                                   field='email') from e
        if not updated:
            if self._find_one(DBAccount.account_id == account_id) is None:
                raise AccountNotFound(f'No account {account_id}')
            raise ConcurrentUpdate(
                f'Account {account_id} changed since it was read'
            )
        return account._replace(account_id=account_id,
                                version=account.version + 1)
