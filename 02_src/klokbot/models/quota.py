"""Quota data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class QuotaSnapshot:
    """Points of an account as returned by GET /points. Read fresh every tick."""

    points: int
    referral_points: int
    total_points: int

    @property
    def has_quota(self) -> bool:
        return self.total_points > 0

    @classmethod
    def from_payload(cls, payload: dict) -> "QuotaSnapshot":
        """Build from the /points response body. Raises KeyError/ValueError/TypeError."""
        return cls(
            points=int(payload["points"]),
            referral_points=int(payload["referral_points"]),
            total_points=int(payload["total_points"]),
        )
