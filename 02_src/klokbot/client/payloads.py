"""Request bodies for the thread and chat endpoints."""

import uuid
from datetime import datetime, timezone

THREAD_TITLE = "New Chat"
DATASET_ID = "34a725bc-3374-4042-9c37-c2076a8e4c2b"
CHAT_MODEL = "llama-3.3-70b-instruct"
CHAT_LANGUAGE = "english"


def iso_timestamp(now: datetime | None = None) -> str:
    """UTC timestamp with millisecond precision and a Z suffix."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def _user_message(content: str) -> list[dict]:
    return [{"role": "user", "content": content}]


def build_thread_payload(
    message: str,
    *,
    thread_id: str | None = None,
    now: datetime | None = None,
) -> dict:
    """Body of POST /threads. A fresh UUID is generated unless thread_id is given."""
    return {
        "title": THREAD_TITLE,
        "messages": _user_message(message),
        "sources": None,
        "id": thread_id or str(uuid.uuid4()),
        "dataset_id": DATASET_ID,
        "created_at": iso_timestamp(now),
    }


def build_chat_payload(
    thread_id: str,
    ai_id: str,
    message: str,
    *,
    now: datetime | None = None,
) -> dict:
    """Body of POST /chat."""
    return {
        "id": thread_id,
        "ai_id": ai_id,
        "title": THREAD_TITLE,
        "messages": _user_message(message),
        "sources": [],
        "model": CHAT_MODEL,
        "created_at": iso_timestamp(now),
        "language": CHAT_LANGUAGE,
    }
