"""Upstream API client module."""

from .klok_client import IKlokClient, KlokClient, build_headers
from .payloads import (
    CHAT_MODEL,
    DATASET_ID,
    THREAD_TITLE,
    build_chat_payload,
    build_thread_payload,
    iso_timestamp,
)

__all__ = [
    "IKlokClient",
    "KlokClient",
    "build_headers",
    "CHAT_MODEL",
    "DATASET_ID",
    "THREAD_TITLE",
    "build_chat_payload",
    "build_thread_payload",
    "iso_timestamp",
]
