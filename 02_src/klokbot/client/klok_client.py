"""HTTP client for the upstream chat API."""

from typing import Protocol

import httpx

from ..config import DEFAULT_API_BASE_URL, DEFAULT_REQUEST_TIMEOUT
from ..errors import AmbiguousDeliveryError, KlokAPIError
from ..logging_config import get_logger
from ..models import QuotaSnapshot, Thread
from .payloads import build_chat_payload, build_thread_payload

logger = get_logger(__name__)


MAX_DETAIL_LENGTH = 500


class IKlokClient(Protocol):
    """Upstream API operations used by an AccountSession."""

    async def get_points(self) -> QuotaSnapshot:
        """GET /points."""
        ...

    async def list_threads(self) -> list[Thread]:
        """GET /threads, in server order."""
        ...

    async def create_thread(self, message: str) -> Thread:
        """POST /threads seeded with one user message."""
        ...

    async def send_message(self, thread_id: str, ai_id: str, message: str) -> None:
        """POST /chat. Raises AmbiguousDeliveryError if the reply stream breaks."""
        ...

    async def close(self) -> None:
        """Release the underlying connection pool."""
        ...


def build_headers(token: str) -> dict[str, str]:
    return {
        "x-session-token": token,
        "user-agent": "Mozilla/5.0",
        "accept": "*/*",
        "origin": "https://klokapp.ai",
        "referer": "https://klokapp.ai/",
    }


def _describe(exc: Exception) -> str:
    text = str(exc)
    return f"{type(exc).__name__}: {text}" if text else type(exc).__name__


class KlokClient:
    """One authenticated httpx client per account."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=build_headers(token),
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request_json(self, method: str, path: str, **kwargs) -> dict:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise KlokAPIError(f"{method} {path} failed: {_describe(e)}") from e

        if response.is_error:
            raise KlokAPIError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
                detail=response.text[:MAX_DETAIL_LENGTH] or None,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise KlokAPIError(
                f"{method} {path} returned invalid JSON",
                status_code=response.status_code,
                detail=response.text[:MAX_DETAIL_LENGTH] or None,
            ) from e

        if not isinstance(data, dict):
            raise KlokAPIError(
                f"{method} {path} returned {type(data).__name__}, expected an object",
                status_code=response.status_code,
            )
        return data

    async def get_points(self) -> QuotaSnapshot:
        data = await self._request_json("GET", "/points")
        try:
            return QuotaSnapshot.from_payload(data)
        except (KeyError, TypeError, ValueError) as e:
            raise KlokAPIError(f"GET /points: malformed response ({_describe(e)})") from e

    async def list_threads(self) -> list[Thread]:
        data = await self._request_json("GET", "/threads")
        items = data.get("data") or []
        if not isinstance(items, list):
            raise KlokAPIError("GET /threads: 'data' is not a list")
        threads = []
        for index, item in enumerate(items):
            try:
                threads.append(Thread.from_payload(item))
            except (KeyError, TypeError, ValueError) as e:
                # Malformed entries are skipped, order is kept
                logger.warning("GET /threads: skipping entry %s (%s)", index, _describe(e))
        return threads

    async def create_thread(self, message: str) -> Thread:
        data = await self._request_json(
            "POST", "/threads", json=build_thread_payload(message)
        )
        try:
            return Thread.from_payload(data)
        except (KeyError, TypeError, ValueError) as e:
            raise KlokAPIError(f"POST /threads: malformed response ({_describe(e)})") from e

    async def send_message(self, thread_id: str, ai_id: str, message: str) -> None:
        """Post a chat message and drain the streamed reply.

        Once a 2xx status has arrived the server has accepted the message,
        so a failure while reading the body is raised as
        AmbiguousDeliveryError instead of KlokAPIError.
        """
        payload = build_chat_payload(thread_id, ai_id, message)
        try:
            async with self._client.stream("POST", "/chat", json=payload) as response:
                if response.is_error:
                    await response.aread()
                    raise KlokAPIError(
                        f"POST /chat returned {response.status_code}",
                        status_code=response.status_code,
                        detail=response.text[:MAX_DETAIL_LENGTH] or None,
                    )
                try:
                    await response.aread()
                except (httpx.TransportError, httpx.StreamError) as e:
                    raise AmbiguousDeliveryError(
                        f"POST /chat stream aborted: {_describe(e)}",
                        status_code=response.status_code,
                    ) from e
        except httpx.HTTPError as e:
            raise KlokAPIError(f"POST /chat failed: {_describe(e)}") from e
