"""Startup data sources: account credentials and outgoing messages."""

from .credentials import load_accounts
from .messages import IMessageSource, MessageSource, load_messages

__all__ = ["load_accounts", "IMessageSource", "MessageSource", "load_messages"]
