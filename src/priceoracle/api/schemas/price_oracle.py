"""Schemas for /api/price-oracle endpoints."""

import datetime as dt
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator

from priceoracle.domain.enums import JobStatus, Network, PriceSource
from priceoracle.domain.models import PriceResult


class PricePointResponse(BaseModel):
    date: dt.date
    price: Decimal
    source: PriceSource
    timestamp: int

    model_config = {"from_attributes": True}


class InterpolationResponse(BaseModel):
    before_price: Optional[PricePointResponse] = None
    after_price: Optional[PricePointResponse] = None


class PriceResponse(BaseModel):
    price: Decimal
    source: PriceSource
    timestamp: int
    cached: bool = False
    interpolation: Optional[InterpolationResponse] = None

    @classmethod
    def from_result(cls, result: PriceResult) -> "PriceResponse":
        interpolation = None
        if result.is_interpolated:
            interpolation = InterpolationResponse(
                before_price=PricePointResponse.model_validate(result.before) if result.before else None,
                after_price=PricePointResponse.model_validate(result.after) if result.after else None,
            )
        return cls(
            price=result.price,
            source=result.source,
            timestamp=result.timestamp,
            cached=result.cached,
            interpolation=interpolation,
        )


class ScheduleRequest(BaseModel):
    token: str
    network: Network

    @field_validator("token")
    @classmethod
    def normalize_token(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("token must not be empty")
        return v


class ScheduleResponse(BaseModel):
    message: str = "Price history fetch scheduled"
    job_id: str
    token: str
    network: str
    status: JobStatus
    creation_date: datetime


class JobStatusResponse(BaseModel):
    job_id: str
    status: JobStatus
    progress: int
    total_days: int
    processed_days: int
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PriceHistoryResponse(BaseModel):
    token: str
    network: str
    prices: list[PricePointResponse]
    total: int
    first_date: Optional[date] = None
    last_date: Optional[date] = None
