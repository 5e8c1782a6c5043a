"""Daily historical token prices."""

import datetime as dt
from decimal import Decimal

from sqlalchemy import Date, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from priceoracle.db.session import Base, TimestampMixin


class TokenPrice(TimestampMixin, Base):
    """One USD price per (token, network, day). Rows are never updated or deleted."""

    __tablename__ = "token_prices"
    __table_args__ = (
        UniqueConstraint("token", "network", "date", name="uq_token_prices_token_network_date"),
        Index("ix_token_prices_token_network_timestamp", "token", "network", "timestamp"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token: Mapped[str] = mapped_column(String(64), index=True)
    network: Mapped[str] = mapped_column(String(20))
    date: Mapped[dt.date] = mapped_column(Date)
    price: Mapped[Decimal] = mapped_column(Numeric(38, 18))
    source: Mapped[str] = mapped_column(String(20), default="live")  # live / interpolated
    timestamp: Mapped[int] = mapped_column(Integer)  # Unix epoch, start of day UTC
