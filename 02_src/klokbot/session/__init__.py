"""Account session module."""

from .account_session import (
    INITIAL_THREAD_MESSAGE,
    RECOVERY_THREAD_MESSAGE,
    AccountSession,
    IAccountSession,
)

__all__ = [
    "AccountSession",
    "IAccountSession",
    "INITIAL_THREAD_MESSAGE",
    "RECOVERY_THREAD_MESSAGE",
]
