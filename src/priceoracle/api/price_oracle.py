from datetime import UTC, date, datetime, timedelta
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from priceoracle.api.deps import get_backfill_engine, get_resolver, get_store
from priceoracle.api.schemas.price_oracle import (
    JobStatusResponse,
    PriceHistoryResponse,
    PricePointResponse,
    PriceResponse,
    ScheduleRequest,
    ScheduleResponse,
)
from priceoracle.backfill import BackfillEngine
from priceoracle.domain.enums import Network
from priceoracle.domain.models import normalize_token
from priceoracle.exceptions import PriceNotFoundError
from priceoracle.infra.storage import PriceStore
from priceoracle.pricing import PriceResolver

router = APIRouter(prefix="/api/price-oracle", tags=["price-oracle"])

ResolverDep = Annotated[PriceResolver, Depends(get_resolver)]
EngineDep = Annotated[BackfillEngine, Depends(get_backfill_engine)]
StoreDep = Annotated[PriceStore, Depends(get_store)]

HISTORY_DEFAULT_DAYS = 30


def _token_param(token: str) -> str:
    token = normalize_token(token)
    if not token:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="token must not be empty")
    return token


@router.get("/price", response_model=PriceResponse)
async def get_price(
    resolver: ResolverDep,
    token: str = Query(..., min_length=1, description="Token contract address"),
    network: Network = Query(...),
    timestamp: int = Query(..., ge=0, description="Unix timestamp in seconds"),
) -> PriceResponse:
    """Historical price of a token at a timestamp (cache, store, live source, then interpolation)."""
    try:
        result = await resolver.resolve(_token_param(token), network.value, timestamp)
    except PriceNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No price data available for the specified token and timestamp",
        )
    return PriceResponse.from_result(result)


@router.post("/schedule", response_model=ScheduleResponse, status_code=status.HTTP_202_ACCEPTED)
async def schedule_backfill(body: ScheduleRequest, engine: EngineDep) -> ScheduleResponse:
    """Schedule a full price history backfill. Returns immediately; poll /jobs/{job_id}."""
    job = await engine.schedule(body.token, body.network.value)
    return ScheduleResponse(
        job_id=job.job_id,
        token=job.token,
        network=job.network,
        status=job.status,
        creation_date=job.creation_date,
    )


@router.get("/jobs/{job_id}", response_model=JobStatusResponse)
async def get_job_status(job_id: str, engine: EngineDep) -> JobStatusResponse:
    view = await engine.get_status(job_id)
    if view is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    return JobStatusResponse.model_validate(view)


@router.get("/history", response_model=PriceHistoryResponse)
async def get_price_history(
    store: StoreDep,
    token: str = Query(..., min_length=1),
    network: Network = Query(...),
    start: Optional[date] = Query(None, description="First day (default: 30 days before end)"),
    end: Optional[date] = Query(None, description="Last day (default: today, UTC)"),
) -> PriceHistoryResponse:
    """Stored daily prices in an inclusive date range, oldest first."""
    end = end or datetime.now(UTC).date()
    start = start or end - timedelta(days=HISTORY_DEFAULT_DAYS)
    if start > end:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="start must not be after end")

    token = _token_param(token)
    records = await store.get_prices_in_range(token, network.value, start, end)
    return PriceHistoryResponse(
        token=token,
        network=network.value,
        prices=[PricePointResponse.model_validate(r) for r in records],
        total=len(records),
        first_date=records[0].date if records else None,
        last_date=records[-1].date if records else None,
    )
