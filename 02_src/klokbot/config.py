"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .errors import ConfigError

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "03_data"
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_TOKENS_PATH = DATA_DIR / "tokens.json"
DEFAULT_MESSAGES_PATH = DATA_DIR / "questions.txt"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DEFAULT_API_BASE_URL = "https://api1-pp.klokapp.ai/v1"
DEFAULT_CHAT_INTERVAL = 60.0
DEFAULT_REQUEST_TIMEOUT = 60.0

DATA_DIR.mkdir(parents=True, exist_ok=True)
LOGS_DIR.mkdir(parents=True, exist_ok=True)


PathLike = Union[str, Path]


def resolve_data_path(env_value: PathLike | None, default: Path) -> Path:
    """Resolve a data file path relative to the project root."""
    if not env_value:
        return default

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def _read_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e


@dataclass(frozen=True)
class Settings:
    """Runtime settings shared by every account."""

    api_base_url: str = DEFAULT_API_BASE_URL
    chat_interval: float = DEFAULT_CHAT_INTERVAL
    tokens_file: Path = DEFAULT_TOKENS_PATH
    messages_file: Path = DEFAULT_MESSAGES_PATH
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    recovery_backoff: float = 0.0

    def __post_init__(self) -> None:
        if self.chat_interval <= 0:
            raise ConfigError("chat interval must be positive")
        if self.request_timeout <= 0:
            raise ConfigError("request timeout must be positive")
        if self.recovery_backoff < 0:
            raise ConfigError("recovery backoff must not be negative")


def load_settings() -> Settings:
    """Build Settings from KLOK_* environment variables."""
    return Settings(
        api_base_url=os.getenv("KLOK_API_BASE_URL") or DEFAULT_API_BASE_URL,
        chat_interval=_read_float("KLOK_CHAT_INTERVAL", DEFAULT_CHAT_INTERVAL),
        tokens_file=resolve_data_path(
            os.getenv("KLOK_TOKENS_FILE"), DEFAULT_TOKENS_PATH
        ),
        messages_file=resolve_data_path(
            os.getenv("KLOK_MESSAGES_FILE"), DEFAULT_MESSAGES_PATH
        ),
        request_timeout=_read_float("KLOK_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
        recovery_backoff=_read_float("KLOK_RECOVERY_BACKOFF", 0.0),
    )
