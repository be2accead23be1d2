"""AccountSession implementation."""

import time
from typing import Callable, Protocol

from ..client import IKlokClient
from ..errors import AmbiguousDeliveryError, KlokAPIError
from ..logging_config import get_account_logger
from ..models import (
    AccountCredential,
    QuotaSnapshot,
    SendOutcome,
    SessionState,
    Thread,
    TickResult,
)
from ..sources import IMessageSource

INITIAL_THREAD_MESSAGE = "Starting a new conversation"
RECOVERY_THREAD_MESSAGE = "New conversation because the previous one failed"


class IAccountSession(Protocol):
    """Per-account thread state and the work done on every tick."""

    @property
    def label(self) -> str:
        """Account label used in logs."""
        ...

    async def initialize(self) -> str | None:
        """Adopt the first existing thread or create one. Return the thread id."""
        ...

    async def tick(self) -> TickResult:
        """Recover the thread if needed, check quota, send one message."""
        ...


class AccountSession:
    """Owns the thread reference of one account.

    The session is either NO_THREAD or HAS_THREAD. A tick in NO_THREAD
    first tries to create a thread and ends early if that fails. The
    thread reference is cleared only when a send fails definitively.
    """

    def __init__(
        self,
        label: str,
        credential: AccountCredential,
        client: IKlokClient,
        messages: IMessageSource,
        recovery_backoff: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._label = label
        self._credential = credential
        self._client = client
        self._messages = messages
        self._recovery_backoff = recovery_backoff
        self._clock = clock
        self._logger = get_account_logger(__name__, label)

        self._thread_id: str | None = None
        self._next_recovery_at = 0.0

    @property
    def label(self) -> str:
        return self._label

    @property
    def credential(self) -> AccountCredential:
        return self._credential

    @property
    def thread_id(self) -> str | None:
        return self._thread_id

    @property
    def state(self) -> SessionState:
        if self._thread_id is None:
            return SessionState.NO_THREAD
        return SessionState.HAS_THREAD

    async def initialize(self) -> str | None:
        """Reuse the first listed thread, otherwise create a new one.

        Failures leave the session in NO_THREAD; the next tick recovers.
        """
        await self.check_quota()

        threads = await self._list_threads()
        if threads:
            self._thread_id = threads[0].id
            self._logger.info("Using old thread: %s", self._thread_id)
        else:
            thread = await self._create_thread(INITIAL_THREAD_MESSAGE)
            if thread:
                self._thread_id = thread.id

        return self._thread_id

    async def check_quota(self) -> QuotaSnapshot | None:
        """Fetch points. None means the quota could not be confirmed."""
        try:
            quota = await self._client.get_points()
        except KlokAPIError as e:
            self._logger.error("Failed to check points: %s", e)
            return None

        self._logger.info(
            "Points: %s | Referral: %s | Total: %s",
            quota.points,
            quota.referral_points,
            quota.total_points,
        )
        return quota

    async def send(self, message: str) -> SendOutcome:
        """Send one message into the current thread."""
        thread_id = self._thread_id
        if thread_id is None:
            raise RuntimeError("AccountSession has no thread")

        try:
            await self._client.send_message(thread_id, self._credential.ai_id, message)
        except AmbiguousDeliveryError as e:
            self._logger.warning("Stream aborted, likely still sent: %s", e)
            return SendOutcome.AMBIGUOUS
        except KlokAPIError as e:
            self._logger.error("Failed to send message: %s", e)
            return SendOutcome.FAILED

        self._logger.info("Message sent to thread %s", thread_id)
        return SendOutcome.DELIVERED

    async def tick(self) -> TickResult:
        """Run one step of the session state machine."""
        if self._thread_id is None:
            blocked = await self._recover()
            if blocked is not None:
                return blocked

        quota = await self.check_quota()
        if quota is None:
            self._logger.info("Points unknown, skipping this round")
            return TickResult.QUOTA_UNKNOWN
        if not quota.has_quota:
            self._logger.info("No points available. Waiting...")
            return TickResult.QUOTA_EXHAUSTED

        outcome = await self.send(self._messages.pick())
        if outcome is SendOutcome.FAILED:
            self._thread_id = None
            return TickResult.SEND_FAILED
        return TickResult.SENT

    async def _recover(self) -> TickResult | None:
        """Create a replacement thread. Return a TickResult if the tick must end."""
        if self._clock() < self._next_recovery_at:
            self._logger.debug("Thread recovery deferred by backoff")
            return TickResult.RECOVERY_DEFERRED

        thread = await self._create_thread(RECOVERY_THREAD_MESSAGE)
        if thread is None:
            self._next_recovery_at = self._clock() + self._recovery_backoff
            return TickResult.RECOVERY_FAILED

        self._thread_id = thread.id
        return None

    async def _list_threads(self) -> list[Thread]:
        try:
            return await self._client.list_threads()
        except KlokAPIError as e:
            self._logger.error("Failed to get threads: %s", e)
            return []

    async def _create_thread(self, message: str) -> Thread | None:
        try:
            thread = await self._client.create_thread(message)
        except KlokAPIError as e:
            self._logger.error("Failed to create thread: %s", e)
            return None

        self._logger.info("New thread: %s", thread.id)
        return thread
