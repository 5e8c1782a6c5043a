"""Domain types for daily token prices and resolution results."""

import datetime as dt
from datetime import UTC, date, datetime, time
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from priceoracle.domain.enums import PriceSource


def normalize_token(address: str) -> str:
    """EVM addresses are hex and case-insensitive; store them lowercase."""
    return address.strip().lower()


def day_of(timestamp: int) -> date:
    """Calendar day (UTC) containing a Unix timestamp."""
    return datetime.fromtimestamp(timestamp, tz=UTC).date()


def day_start(day: date) -> int:
    """Unix timestamp of 00:00:00 UTC on the given day."""
    return int(datetime.combine(day, time.min, tzinfo=UTC).timestamp())


class PriceRecord(BaseModel):
    """One stored daily price. Unique per (token, network, date) and never mutated."""

    model_config = ConfigDict(frozen=True)

    token: str
    network: str
    date: dt.date
    price: Decimal
    source: PriceSource = PriceSource.LIVE
    timestamp: int  # Start of day, UTC

    @classmethod
    def for_day(cls, token: str, network: str, day: date, price: Decimal, source: PriceSource = PriceSource.LIVE) -> "PriceRecord":
        return cls(token=token, network=network, date=day, price=price, source=source, timestamp=day_start(day))


class PriceResult(BaseModel):
    """Outcome of a price resolution.

    `before` / `after` are set only for interpolated results; a missing side stays None.
    """

    price: Decimal
    source: PriceSource
    timestamp: int
    cached: bool = False
    before: PriceRecord | None = None
    after: PriceRecord | None = None

    @property
    def is_interpolated(self) -> bool:
        return self.source == PriceSource.INTERPOLATED

    def to_cache_payload(self) -> dict:
        return self.model_dump(mode="json", exclude={"cached"})

    @classmethod
    def from_cache_payload(cls, payload: dict) -> "PriceResult":
        return cls.model_validate({**payload, "cached": True})
