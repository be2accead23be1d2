"""Account-related data models."""

from dataclasses import dataclass


def mask_secret(raw: str, keep: int = 4) -> str:
    if not raw:
        return ""
    if len(raw) <= keep:
        return "*" * len(raw)
    return f"{raw[:keep]}{'*' * (len(raw) - keep)}"


@dataclass(frozen=True)
class AccountCredential:
    """Session token and assistant id of one account. Immutable."""

    token: str
    ai_id: str

    def __repr__(self) -> str:
        return f"AccountCredential(token={mask_secret(self.token)!r}, ai_id={self.ai_id!r})"
