from enum import Enum


class PriceSource(str, Enum):
    """Where a price came from."""

    LIVE = "live"
    INTERPOLATED = "interpolated"
