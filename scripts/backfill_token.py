"""Backfill a token's daily price history and follow the job until it finishes.

Usage:
    PYTHONPATH=src python scripts/backfill_token.py 0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48 ethereum
"""

import asyncio
import logging
import sys

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)-5s %(name)s - %(message)s")
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

POLL_SECONDS = 2.0


async def main(token: str, network: str) -> int:
    from priceoracle.container import Container
    from priceoracle.domain.enums import Network

    if network not in {n.value for n in Network}:
        print(f"Unsupported network: {network}")
        return 2

    container = Container()
    engine = container.backfill_engine()
    try:
        job = await engine.schedule(token, network)
        print(f"Job {job.job_id}: {job.token} on {job.network} since {job.creation_date.date()}")

        while True:
            view = await engine.get_status(job.job_id)
            if view is None:
                print("Job record lost")
                return 1
            print(f"  {view.status.value:<10} {view.progress:>3}%  ({view.processed_days}/{view.total_days} days)")
            if view.status.is_terminal:
                if view.error:
                    print(f"  error: {view.error}")
                return 0 if view.error is None else 1
            await asyncio.sleep(POLL_SECONDS)
    finally:
        await container.job_runner().shutdown()
        await container.http_client().close()
        await container.redis().aclose()
        await container.engine().dispose()


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(2)
    sys.exit(asyncio.run(main(sys.argv[1], sys.argv[2])))
