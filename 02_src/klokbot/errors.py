"""Exception hierarchy."""


class ConfigError(ValueError):
    """Startup configuration is missing or malformed. Fatal."""


class KlokAPIError(RuntimeError):
    """Transport or protocol failure talking to the upstream API."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        detail: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail

    def __str__(self) -> str:
        base = super().__str__()
        if self.detail:
            return f"{base}: {self.detail}"
        return base


class AmbiguousDeliveryError(KlokAPIError):
    """The chat request was accepted but its response stream was cut off.

    The message has most likely reached the server already.
    """
