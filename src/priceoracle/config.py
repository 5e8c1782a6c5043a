from datetime import UTC, datetime

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_name: str = "priceoracle"
    redis_url: str = "redis://localhost:6379/0"
    alchemy_api_key: str = ""
    debug: bool = False

    cache_ttl_seconds: int = 300
    backfill_batch_size: int = 10
    backfill_batch_delay_seconds: float = 2.0  # Between batches, respects provider rate limits
    source_max_retries: int = 3
    source_backoff_seconds: float = 1.0
    source_rate_limit_wait_seconds: float = 2.0
    source_rate_per_second: float = 5.0
    default_creation_date: datetime = datetime(2020, 1, 1, tzinfo=UTC)

    @property
    def database_url(self) -> str:
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    class Config:
        env_file = ".env"


settings = Settings()
