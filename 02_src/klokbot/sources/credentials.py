"""Credential source: a JSON array of {token, ai_id} objects."""

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import ConfigError
from ..models import AccountCredential


class AccountEntry(BaseModel):
    """One entry of tokens.json."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    token: str = Field(min_length=1)
    ai_id: str = Field(min_length=1)


def load_accounts(path: str | Path) -> list[AccountCredential]:
    """Load and validate account credentials.

    Raises:
        ConfigError: the file is missing, is not valid JSON, is not a
            non-empty list, or an entry lacks a token or ai_id.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path.name} is not valid JSON: {e}") from e

    if not isinstance(data, list) or not data:
        raise ConfigError(f"{path.name} is empty or in the wrong format")

    accounts = []
    for index, item in enumerate(data):
        try:
            entry = AccountEntry.model_validate(item)
        except ValidationError as e:
            raise ConfigError(
                f"Account #{index + 1} in {path.name} must have a 'token' and an 'ai_id'"
            ) from e
        accounts.append(AccountCredential(token=entry.token, ai_id=entry.ai_id))

    return accounts
