"""Error taxonomy for price resolution and backfill."""


class PriceOracleError(Exception):
    """Base class for all price oracle errors."""


class ExternalServiceError(PriceOracleError):
    """Upstream price provider failed (transport, 5xx, malformed payload). Retryable."""


class RateLimitedError(ExternalServiceError):
    """Upstream provider answered HTTP 429."""


class NoDataError(PriceOracleError):
    """Upstream provider has no data for the request (e.g. token without transfers)."""


class BackendUnavailableError(PriceOracleError):
    """Durable store or cache backend could not serve the operation."""

    def __init__(self, backend: str, operation: str, cause: BaseException | None = None) -> None:
        self.backend = backend
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{backend} unavailable during {operation}{detail}")


class PriceNotFoundError(PriceOracleError):
    """No price could be derived by any resolution tier."""

    def __init__(self, token: str, network: str, timestamp: int) -> None:
        self.token = token
        self.network = network
        self.timestamp = timestamp
        super().__init__(f"No price data available for {token} on {network} at {timestamp}")


class JobExecutionError(PriceOracleError):
    """Unrecoverable failure while driving a backfill job."""
