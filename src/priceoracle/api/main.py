import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.requests import Request
from starlette.responses import JSONResponse

from priceoracle.api.price_oracle import router as price_oracle_router
from priceoracle.container import Container

logger = logging.getLogger("priceoracle.api")


async def _check_backends(container: Container) -> None:
    """Warn at startup when a durable backend is down; requests then use in-memory fallbacks."""
    try:
        async with container.engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("PostgreSQL not available, prices and jobs will be kept in memory: %s", e)
    try:
        await container.redis().ping()
    except (RedisError, OSError) as e:
        logger.warning("Redis not available, using in-memory price cache: %s", e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = Container()
    app.state.container = container
    await _check_backends(container)
    yield
    await container.job_runner().shutdown()
    await container.http_client().close()
    await container.redis().aclose()
    await container.engine().dispose()


app = FastAPI(title="Price Oracle", version="0.1.0", lifespan=lifespan)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled error on %s %s:\n%s", request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"detail": str(exc)})


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(price_oracle_router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
