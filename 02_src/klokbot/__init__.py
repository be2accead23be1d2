"""Multi-account chat scheduler for the Klok API."""

from .app import Application, IApplication
from .client import IKlokClient, KlokClient
from .config import Settings, load_settings
from .errors import AmbiguousDeliveryError, ConfigError, KlokAPIError
from .models import (
    AccountCredential,
    QuotaSnapshot,
    SendOutcome,
    SessionState,
    Thread,
    TickResult,
)
from .scheduler import ISessionScheduler, SessionScheduler
from .session import AccountSession, IAccountSession
from .sources import IMessageSource, MessageSource, load_accounts, load_messages

__all__ = [
    # Application
    "Application",
    "IApplication",
    "Settings",
    "load_settings",
    # Errors
    "ConfigError",
    "KlokAPIError",
    "AmbiguousDeliveryError",
    # Models
    "AccountCredential",
    "QuotaSnapshot",
    "Thread",
    "SessionState",
    "SendOutcome",
    "TickResult",
    # Components
    "IKlokClient",
    "KlokClient",
    "IAccountSession",
    "AccountSession",
    "ISessionScheduler",
    "SessionScheduler",
    "IMessageSource",
    "MessageSource",
    "load_accounts",
    "load_messages",
]
