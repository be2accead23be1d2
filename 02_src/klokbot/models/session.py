"""Session state machine models."""

from enum import Enum


class SessionState(str, Enum):
    """State of an AccountSession at the start of a tick."""

    NO_THREAD = "no_thread"
    HAS_THREAD = "has_thread"


class SendOutcome(str, Enum):
    """Result of one chat send attempt."""

    DELIVERED = "delivered"
    AMBIGUOUS = "ambiguous"  # stream cut off after the request was accepted
    FAILED = "failed"


class TickResult(str, Enum):
    """How a tick ended."""

    RECOVERY_FAILED = "recovery_failed"
    RECOVERY_DEFERRED = "recovery_deferred"
    QUOTA_UNKNOWN = "quota_unknown"
    QUOTA_EXHAUSTED = "quota_exhausted"
    SENT = "sent"
    SEND_FAILED = "send_failed"
