"""Core data models for klok-bot."""

from .account import AccountCredential
from .quota import QuotaSnapshot
from .session import SendOutcome, SessionState, TickResult
from .thread import Thread

__all__ = [
    # Accounts
    "AccountCredential",
    "QuotaSnapshot",
    # Threads
    "Thread",
    # Session state machine
    "SessionState",
    "SendOutcome",
    "TickResult",
]
