"""Thread data models."""

from dataclasses import dataclass


@dataclass
class Thread:
    """A server-side conversation."""

    id: str
    title: str | None = None

    @classmethod
    def from_payload(cls, payload: dict) -> "Thread":
        thread_id = payload["id"]
        if not thread_id:
            raise ValueError("thread id is empty")
        return cls(id=str(thread_id), title=payload.get("title"))
