from dependency_injector import containers, providers
from redis.asyncio import Redis

from priceoracle.backfill import BackfillEngine, JobRunner
from priceoracle.config import Settings
from priceoracle.db.session import build_engine, build_session_factory
from priceoracle.infra.cache import MemoryCache, PriceCache, RedisCache
from priceoracle.infra.http.rate_limited_client import RateLimitedClient
from priceoracle.infra.price import AlchemyPriceSource
from priceoracle.infra.storage import InMemoryPriceBackend, PriceStore, SqlPriceBackend
from priceoracle.pricing import InterpolationEngine, PriceResolver


class Container(containers.DeclarativeContainer):
    wiring_config = containers.WiringConfiguration(modules=["priceoracle.api.deps"])

    settings = providers.Singleton(Settings)

    engine = providers.Singleton(
        build_engine,
        database_url=settings.provided.database_url,
        echo=settings.provided.debug,
    )

    session_factory = providers.Singleton(
        build_session_factory,
        engine=engine,
    )

    redis = providers.Singleton(
        Redis.from_url,
        settings.provided.redis_url,
        socket_connect_timeout=2,
        socket_timeout=2,
    )

    http_client = providers.Singleton(
        RateLimitedClient,
        rate_per_second=settings.provided.source_rate_per_second,
        timeout=30.0,
    )

    price_source = providers.Singleton(
        AlchemyPriceSource,
        http_client=http_client,
        api_key=settings.provided.alchemy_api_key,
        max_retries=settings.provided.source_max_retries,
        backoff=settings.provided.source_backoff_seconds,
        rate_limit_wait=settings.provided.source_rate_limit_wait_seconds,
    )

    price_store = providers.Singleton(
        PriceStore,
        durable=providers.Singleton(SqlPriceBackend, session_factory=session_factory),
        fallback=providers.Singleton(InMemoryPriceBackend),
    )

    price_cache = providers.Singleton(
        PriceCache,
        durable=providers.Singleton(RedisCache, redis=redis),
        fallback=providers.Singleton(MemoryCache),
        default_ttl=settings.provided.cache_ttl_seconds,
    )

    interpolation = providers.Singleton(InterpolationEngine, store=price_store)

    price_resolver = providers.Singleton(
        PriceResolver,
        cache=price_cache,
        store=price_store,
        source=price_source,
        interpolation=interpolation,
        cache_ttl=settings.provided.cache_ttl_seconds,
    )

    job_runner = providers.Singleton(JobRunner)

    backfill_engine = providers.Singleton(
        BackfillEngine,
        store=price_store,
        source=price_source,
        runner=job_runner,
        batch_size=settings.provided.backfill_batch_size,
        batch_delay=settings.provided.backfill_batch_delay_seconds,
        default_creation_date=settings.provided.default_creation_date,
    )
