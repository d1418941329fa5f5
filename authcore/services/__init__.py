"""External collaborators: the account store and outbound notifications."""

from .accounts import AccountStore, SQLAccountStore
from .accounts.memory import InMemoryAccountStore
from .notifications import Notifier, SMTPNotifier
