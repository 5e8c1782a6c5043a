"""Backfill job records — one row per scheduled price history run."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from priceoracle.db.session import Base, TimestampMixin


class BackfillJobRecord(TimestampMixin, Base):
    __tablename__ = "backfill_jobs"
    __table_args__ = (Index("ix_backfill_jobs_token_network", "token", "network"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    job_id: Mapped[str] = mapped_column(String(64), unique=True)
    token: Mapped[str] = mapped_column(String(64))
    network: Mapped[str] = mapped_column(String(20))
    creation_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    status: Mapped[str] = mapped_column(String(20), default="pending")  # pending / processing / completed / failed
    total_days: Mapped[int] = mapped_column(Integer, default=0)
    processed_days: Mapped[int] = mapped_column(Integer, default=0)
    error: Mapped[Optional[str]] = mapped_column(Text, default=None)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), default=None)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), default=None)
