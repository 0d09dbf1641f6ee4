import asyncio
import logging
import time

from dotenv import load_dotenv

from portal.batch.trending_topics import run as run_trending_topics
from portal.common.config import settings

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _sleep_for(interval_s: int, elapsed_s: float) -> int:
    return max(1, interval_s - int(elapsed_s))


def run_once() -> int | None:
    return asyncio.run(run_trending_topics())


def main() -> None:
    interval_s = settings.trending_refresh_interval_s
    logger.info("starting batch runner with interval=%ss", interval_s)

    while True:
        started = time.time()
        try:
            run_once()
            elapsed = time.time() - started
            sleep_for = _sleep_for(interval_s, elapsed)
            logger.info("batch cycle complete in %.2fs; sleeping %ss", elapsed, sleep_for)
            time.sleep(sleep_for)
        except Exception:
            logger.exception("batch cycle failed; retrying in %ss", settings.batch_retry_delay_s)
            time.sleep(settings.batch_retry_delay_s)


if __name__ == "__main__":
    main()
