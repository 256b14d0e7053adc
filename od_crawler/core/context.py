"""
Process-wide crawl context: the configuration, the shared HTTP session
and the shared worker pool, built once at startup and handed to the
orchestrator and every tree walker.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import requests

from od_crawler.config import CrawlerConfig
from od_crawler.session import build_session


@dataclass
class CrawlContext:
    config: CrawlerConfig
    session: requests.Session
    pool: ThreadPoolExecutor

    @classmethod
    def create(cls, config: CrawlerConfig) -> "CrawlContext":
        """Build the session and a pool of ``config.workers`` threads.

        The pool is shared by all tree walkers, so ``config.workers``
        caps the number of requests in flight across every task.
        """
        session = build_session(
            pool_size=config.workers, user_agent=config.user_agent,
        )
        pool = ThreadPoolExecutor(
            max_workers=config.workers, thread_name_prefix="worker",
        )
        return cls(config=config, session=session, pool=pool)

    def close(self, wait: bool = True) -> None:
        self.pool.shutdown(wait=wait)
        self.session.close()
