"""Pytest configuration and fixtures."""

import random
import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def credential():
    """Account credential for testing."""
    from klokbot.models import AccountCredential

    return AccountCredential(token="session-token-1", ai_id="ai-1")


@pytest.fixture
def messages():
    """Deterministic message source."""
    from klokbot.sources import MessageSource

    return MessageSource(["What is a zk-proof?"], rng=random.Random(0))


@pytest.fixture
def fake_client():
    """Mock upstream client: no threads, 10 points, every call succeeds."""
    from klokbot.models import QuotaSnapshot, Thread

    client = Mock()
    client.get_points = AsyncMock(return_value=QuotaSnapshot(5, 5, 10))
    client.list_threads = AsyncMock(return_value=[])
    client.create_thread = AsyncMock(return_value=Thread(id="thread-new"))
    client.send_message = AsyncMock(return_value=None)
    client.close = AsyncMock()
    return client


@pytest.fixture
def make_session(credential, messages):
    """Build an AccountSession around a given client."""
    from klokbot.session import AccountSession

    def _make(client, label="Account-1", **kwargs):
        return AccountSession(
            label=label,
            credential=credential,
            client=client,
            messages=messages,
            **kwargs,
        )

    return _make
