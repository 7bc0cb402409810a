"""
Pre-start check

Run before the API starts (e.g. from a container entrypoint). With
STORE_BACKEND=redis it waits until Redis answers PING, retrying once per
second for up to five minutes, then gives up with a non-zero exit so the
process does not start against an unreachable store. The in-memory backend
needs no check.
"""
import logging

import redis
from tenacity import (
    after_log,
    before_log,
    retry,
    stop_after_attempt,
    wait_fixed,
)

from app.core.config import settings
from app.core.redis import get_redis

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

max_tries = 60 * 5  # five minutes
wait_seconds = 1


@retry(
    stop=stop_after_attempt(max_tries),
    wait=wait_fixed(wait_seconds),
    before=before_log(logger, logging.INFO),
    after=after_log(logger, logging.WARN),
    reraise=True,
)
def init(client: redis.Redis) -> None:
    """
    Ping the store backend; tenacity retries on any failure.
    """
    try:
        client.ping()
    except Exception as e:
        logger.error(e)
        raise e


def main() -> None:
    logger.info("Initializing service")
    if settings.STORE_BACKEND == "redis":
        init(get_redis())
    else:
        logger.info("In-memory credential store, nothing to wait for")
    logger.info("Service finished initializing")


if __name__ == "__main__":  # pragma: no cover
    main()
