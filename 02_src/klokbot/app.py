"""Application bootstrap and lifecycle management."""

from typing import Callable, Protocol, Sequence

from .client import IKlokClient, KlokClient
from .config import Settings
from .logging_config import get_logger
from .models import AccountCredential
from .scheduler import SessionScheduler
from .session import AccountSession
from .sources import IMessageSource

logger = get_logger(__name__)


ClientFactory = Callable[[AccountCredential, Settings], IKlokClient]


def default_client_factory(credential: AccountCredential, settings: Settings) -> IKlokClient:
    return KlokClient(
        token=credential.token,
        base_url=settings.api_base_url,
        timeout=settings.request_timeout,
    )


def account_label(index: int) -> str:
    """Label of the account at a zero-based position in the credential file."""
    return f"Account-{index + 1}"


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Create one session and scheduler per account and start them."""
        ...

    async def stop(self) -> None:
        """Stop schedulers, then close clients."""
        ...


class Application:
    """Runs one independent SessionScheduler per account."""

    def __init__(
        self,
        settings: Settings,
        accounts: Sequence[AccountCredential],
        messages: IMessageSource,
        client_factory: ClientFactory = default_client_factory,
    ):
        if not accounts:
            raise ValueError("at least one account is required")

        self._settings = settings
        self._accounts = list(accounts)
        self._messages = messages
        self._client_factory = client_factory

        # Components (will be initialized in start())
        self._clients: list[IKlokClient] = []
        self._schedulers: list[SessionScheduler] = []

    async def start(self) -> None:
        """Create one client, session and scheduler per account and start them."""
        if self._schedulers:
            return

        logger.info("Starting %s account session(s)", len(self._accounts))

        for index, credential in enumerate(self._accounts):
            client = self._client_factory(credential, self._settings)
            self._clients.append(client)

            session = AccountSession(
                label=account_label(index),
                credential=credential,
                client=client,
                messages=self._messages,
                recovery_backoff=self._settings.recovery_backoff,
            )
            scheduler = SessionScheduler(session, interval=self._settings.chat_interval)
            self._schedulers.append(scheduler)

        for scheduler in self._schedulers:
            await scheduler.start()

        logger.info("All schedulers started")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        for scheduler in self._schedulers:
            await scheduler.stop()
        self._schedulers.clear()

        for client in self._clients:
            try:
                await client.close()
            except Exception as e:
                logger.warning("Failed to close client: %s", e)
        self._clients.clear()
        logger.info("Application stopped")

    @property
    def schedulers(self) -> list[SessionScheduler]:
        """Get running schedulers."""
        if not self._schedulers:
            raise RuntimeError("Application not started")
        return list(self._schedulers)

    @property
    def sessions(self) -> list[AccountSession]:
        """Get account sessions in credential-file order."""
        return [scheduler.session for scheduler in self.schedulers]
