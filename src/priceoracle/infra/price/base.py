"""Abstract boundary to the external blockchain price provider."""

from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal


class PriceSourceClient(ABC):
    @abstractmethod
    async def get_creation_date(self, token: str, network: str) -> datetime:
        """First-transfer time of the token. Raises NoDataError if it has none."""

    @abstractmethod
    async def get_spot_price(self, token: str, network: str, day: date) -> Decimal | None:
        """USD price for the day; None means no data (distinct from an error)."""
