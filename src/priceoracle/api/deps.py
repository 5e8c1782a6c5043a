from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from priceoracle.backfill import BackfillEngine
from priceoracle.container import Container
from priceoracle.infra.storage import PriceStore
from priceoracle.pricing import PriceResolver


@inject
def get_resolver(
    resolver: PriceResolver = Depends(Provide[Container.price_resolver]),
) -> PriceResolver:
    return resolver


@inject
def get_backfill_engine(
    engine: BackfillEngine = Depends(Provide[Container.backfill_engine]),
) -> BackfillEngine:
    return engine


@inject
def get_store(
    store: PriceStore = Depends(Provide[Container.price_store]),
) -> PriceStore:
    return store
