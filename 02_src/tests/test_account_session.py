"""Tests for AccountSession."""

import httpx
import pytest

from klokbot.client import KlokClient
from klokbot.errors import AmbiguousDeliveryError, KlokAPIError
from klokbot.models import QuotaSnapshot, SendOutcome, SessionState, Thread, TickResult
from klokbot.session import INITIAL_THREAD_MESSAGE, RECOVERY_THREAD_MESSAGE


class TestAccountSessionInitialize:
    """Tests for AccountSession.initialize()."""

    @pytest.mark.asyncio
    async def test_creates_thread_when_none_exist(self, fake_client, make_session):
        """Test that an account without threads gets exactly one new thread."""
        session = make_session(fake_client)

        thread_id = await session.initialize()

        assert thread_id == "thread-new"
        assert session.thread_id == "thread-new"
        fake_client.create_thread.assert_awaited_once_with(INITIAL_THREAD_MESSAGE)

    @pytest.mark.asyncio
    async def test_reuses_first_listed_thread(self, fake_client, make_session):
        """Test that the first listed thread is adopted and nothing is created."""
        fake_client.list_threads.return_value = [Thread(id="t1"), Thread(id="t2")]
        session = make_session(fake_client)

        await session.initialize()

        assert session.thread_id == "t1"
        assert session.state is SessionState.HAS_THREAD
        fake_client.create_thread.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_creation_failure_leaves_no_thread(self, fake_client, make_session):
        """Test that a failed creation is not fatal."""
        fake_client.create_thread.side_effect = KlokAPIError("boom")
        session = make_session(fake_client)

        thread_id = await session.initialize()

        assert thread_id is None
        assert session.state is SessionState.NO_THREAD

    @pytest.mark.asyncio
    async def test_list_failure_falls_back_to_create(self, fake_client, make_session):
        """Test that a failed listing is treated as an empty list."""
        fake_client.list_threads.side_effect = KlokAPIError("503")
        session = make_session(fake_client)

        await session.initialize()

        assert session.thread_id == "thread-new"
        fake_client.create_thread.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_checks_points_once(self, fake_client, make_session):
        """Test that initialization logs the starting quota."""
        session = make_session(fake_client)

        await session.initialize()

        fake_client.get_points.assert_awaited_once()
        fake_client.send_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_points_failure_does_not_block(self, fake_client, make_session):
        """Test that initialization proceeds when points cannot be read."""
        fake_client.get_points.side_effect = KlokAPIError("timeout")
        session = make_session(fake_client)

        await session.initialize()

        assert session.thread_id == "thread-new"


class TestAccountSessionQuota:
    """Tests for the quota gate of AccountSession.tick()."""

    @pytest.mark.asyncio
    async def test_zero_points_skips_send(self, fake_client, make_session):
        """Test that an exhausted quota keeps the thread and sends nothing."""
        fake_client.list_threads.return_value = [Thread(id="t1")]
        fake_client.get_points.return_value = QuotaSnapshot(0, 0, 0)
        session = make_session(fake_client)
        await session.initialize()

        result = await session.tick()

        assert result is TickResult.QUOTA_EXHAUSTED
        assert session.thread_id == "t1"
        fake_client.send_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_negative_points_skips_send(self, fake_client, make_session):
        """Test that a negative total counts as exhausted."""
        fake_client.list_threads.return_value = [Thread(id="t1")]
        fake_client.get_points.return_value = QuotaSnapshot(0, 0, -3)
        session = make_session(fake_client)
        await session.initialize()

        assert await session.tick() is TickResult.QUOTA_EXHAUSTED
        fake_client.send_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_points_failure_skips_send(self, fake_client, make_session):
        """Test that unknown quota means no send and no state change."""
        fake_client.list_threads.return_value = [Thread(id="t1")]
        session = make_session(fake_client)
        await session.initialize()
        fake_client.get_points.side_effect = KlokAPIError("502")

        result = await session.tick()

        assert result is TickResult.QUOTA_UNKNOWN
        assert session.thread_id == "t1"
        fake_client.send_message.assert_not_awaited()


class TestAccountSessionSend:
    """Tests for the send step of AccountSession.tick()."""

    @pytest.mark.asyncio
    async def test_sends_to_existing_thread_repeatedly(self, fake_client, make_session):
        """Test that consecutive ticks keep targeting the same thread."""
        fake_client.list_threads.return_value = [Thread(id="T1")]
        session = make_session(fake_client)
        await session.initialize()

        assert await session.tick() is TickResult.SENT
        assert await session.tick() is TickResult.SENT

        assert fake_client.send_message.await_count == 2
        for call in fake_client.send_message.await_args_list:
            assert call.args == ("T1", "ai-1", "What is a zk-proof?")
        assert session.thread_id == "T1"

    @pytest.mark.asyncio
    async def test_send_failure_clears_thread(self, fake_client, make_session):
        """Test that a failed send invalidates the thread."""
        fake_client.list_threads.return_value = [Thread(id="T1")]
        fake_client.send_message.side_effect = KlokAPIError("400")
        session = make_session(fake_client)
        await session.initialize()

        result = await session.tick()

        assert result is TickResult.SEND_FAILED
        assert session.thread_id is None
        assert session.state is SessionState.NO_THREAD

    @pytest.mark.asyncio
    async def test_next_tick_after_send_failure_creates_thread(
        self, fake_client, make_session
    ):
        """Test that recovery happens on the tick after a failed send."""
        fake_client.list_threads.return_value = [Thread(id="T1")]
        fake_client.send_message.side_effect = [KlokAPIError("400"), None]
        fake_client.create_thread.return_value = Thread(id="T2")
        session = make_session(fake_client)
        await session.initialize()
        await session.tick()

        result = await session.tick()

        assert result is TickResult.SENT
        fake_client.create_thread.assert_awaited_once_with(RECOVERY_THREAD_MESSAGE)
        assert session.thread_id == "T2"
        assert fake_client.send_message.await_args.args[0] == "T2"

    @pytest.mark.asyncio
    async def test_ambiguous_delivery_keeps_thread(self, fake_client, make_session):
        """Test that an aborted stream counts as delivered."""
        fake_client.list_threads.return_value = [Thread(id="T1")]
        fake_client.send_message.side_effect = AmbiguousDeliveryError("aborted")
        session = make_session(fake_client)
        await session.initialize()

        result = await session.tick()

        assert result is TickResult.SENT
        assert session.thread_id == "T1"

    @pytest.mark.asyncio
    async def test_send_outcome_classification(self, fake_client, make_session):
        """Test SendOutcome for each client result."""
        fake_client.list_threads.return_value = [Thread(id="T1")]
        session = make_session(fake_client)
        await session.initialize()

        assert await session.send("hi") is SendOutcome.DELIVERED

        fake_client.send_message.side_effect = AmbiguousDeliveryError("aborted")
        assert await session.send("hi") is SendOutcome.AMBIGUOUS

        fake_client.send_message.side_effect = KlokAPIError("500")
        assert await session.send("hi") is SendOutcome.FAILED

    @pytest.mark.asyncio
    async def test_send_without_thread_raises(self, fake_client, make_session):
        """Test that send() requires a thread."""
        session = make_session(fake_client)

        with pytest.raises(RuntimeError, match="no thread"):
            await session.send("hi")


class TestAccountSessionRecovery:
    """Tests for NO_THREAD recovery."""

    @pytest.mark.asyncio
    async def test_repeated_creation_failure(self, fake_client, make_session):
        """Test that failed recovery ends the tick before quota and send."""
        fake_client.create_thread.side_effect = KlokAPIError("500")
        session = make_session(fake_client)
        await session.initialize()
        fake_client.create_thread.reset_mock()
        fake_client.get_points.reset_mock()

        first = await session.tick()
        second = await session.tick()

        assert first is TickResult.RECOVERY_FAILED
        assert second is TickResult.RECOVERY_FAILED
        assert session.thread_id is None
        assert fake_client.create_thread.await_count == 2
        fake_client.get_points.assert_not_awaited()
        fake_client.send_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_recovery_then_send_in_same_tick(self, fake_client, make_session):
        """Test that a recovered thread is used in the same tick."""
        fake_client.create_thread.side_effect = [KlokAPIError("500"), Thread(id="R1")]
        session = make_session(fake_client)
        await session.initialize()

        result = await session.tick()

        assert result is TickResult.SENT
        assert session.thread_id == "R1"
        fake_client.send_message.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_recovery_keeps_thread_when_quota_exhausted(
        self, fake_client, make_session
    ):
        """Test that a recovered thread survives an exhausted quota."""
        fake_client.create_thread.side_effect = [KlokAPIError("500"), Thread(id="R1")]
        fake_client.get_points.return_value = QuotaSnapshot(0, 0, 0)
        session = make_session(fake_client)
        await session.initialize()

        assert await session.tick() is TickResult.QUOTA_EXHAUSTED
        assert session.thread_id == "R1"

    @pytest.mark.asyncio
    async def test_backoff_defers_recovery(self, fake_client, make_session):
        """Test that a configured backoff spaces out recovery attempts."""
        now = [100.0]
        fake_client.create_thread.side_effect = KlokAPIError("500")
        session = make_session(
            fake_client, recovery_backoff=30.0, clock=lambda: now[0]
        )
        await session.initialize()
        fake_client.create_thread.reset_mock()

        assert await session.tick() is TickResult.RECOVERY_FAILED
        now[0] += 10
        assert await session.tick() is TickResult.RECOVERY_DEFERRED
        now[0] += 25
        assert await session.tick() is TickResult.RECOVERY_FAILED

        assert fake_client.create_thread.await_count == 2

    @pytest.mark.asyncio
    async def test_no_backoff_retries_every_tick(self, fake_client, make_session):
        """Test that the default retries on every tick."""
        fake_client.create_thread.side_effect = KlokAPIError("500")
        session = make_session(fake_client, clock=lambda: 0.0)
        await session.initialize()
        fake_client.create_thread.reset_mock()

        for _ in range(3):
            assert await session.tick() is TickResult.RECOVERY_FAILED

        assert fake_client.create_thread.await_count == 3


class TestAccountSessionWithHttpClient:
    """AccountSession driving a KlokClient over a mocked transport."""

    @pytest.mark.asyncio
    async def test_reuses_first_thread_despite_malformed_entry(self, make_session):
        """Test that a bad later entry in the listing does not trigger a new thread."""
        created = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/points"):
                return httpx.Response(
                    200, json={"points": 5, "referral_points": 0, "total_points": 5}
                )
            if request.method == "GET":
                return httpx.Response(
                    200, json={"data": [{"id": "T1"}, {"title": "no id"}]}
                )
            created.append(request)
            return httpx.Response(200, json={"id": "NEW"})

        client = KlokClient(
            token="tok", base_url="https://api.test/v1", transport=httpx.MockTransport(handler)
        )
        session = make_session(client)

        await session.initialize()
        await client.close()

        assert session.thread_id == "T1"
        assert created == []
