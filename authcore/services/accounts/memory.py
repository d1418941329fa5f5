"""An in-process account store, for tests and local development."""

import threading
import uuid
from typing import Callable, Dict, Optional

from ...domain import Account
from ...exceptions import AccountNotFound, ConcurrentUpdate, DuplicateAccount
from . import AccountStore


class InMemoryAccountStore(AccountStore):
    """Keeps accounts in a dict. Each call holds a lock for its duration."""

    def __init__(self) -> None:
        self._accounts: Dict[str, Account] = {}
        self._lock = threading.Lock()

    def _find(self, match: Callable[[Account], bool]) -> Optional[Account]:
        with self._lock:
            for account in self._accounts.values():
                if match(account):
                    return account
        return None

    def find_by_email(self, email: str) -> Optional[Account]:
        return self._find(lambda a: a.email == email)

    def find_by_name(self, name: str) -> Optional[Account]:
        return self._find(lambda a: a.name == name)

    def find_by_email_and_name(self, email: str,
                               name: str) -> Optional[Account]:
        return self._find(lambda a: a.email == email and a.name == name)

    def find_by_refresh_token(self, token: str) -> Optional[Account]:
        if not token:
            return None
        return self._find(lambda a: a.refresh_token == token)

    def create(self, account: Account) -> Account:
        with self._lock:
            if any(a.email == account.email for a in self._accounts.values()):
                raise DuplicateAccount('Email is already registered',
                                       field='email')
            account_id = account.account_id or str(uuid.uuid4())
            created = account._replace(account_id=account_id, version=0)
            self._accounts[account_id] = created
            return created

    def update(self, account_id: str, account: Account) -> Account:
        with self._lock:
            current = self._accounts.get(account_id)
            if current is None:
                raise AccountNotFound(f'No account {account_id}')
            if current.version != account.version:
                raise ConcurrentUpdate(
                    f'Account {account_id} changed since it was read'
                )
            if any(a.email == account.email for key, a
                   in self._accounts.items() if key != account_id):
                raise DuplicateAccount('Email is already registered',
                                       field='email')
            updated = account._replace(account_id=account_id,
                                       version=account.version + 1)
            self._accounts[account_id] = updated
            return updated
