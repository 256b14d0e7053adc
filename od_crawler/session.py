"""
HTTP session creation and the fetch primitive used by every worker.

A single ``requests.Session`` is shared by the whole process; its
connection pool is sized to the worker count so that parallel workers
never wait on each other for a socket.
"""

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from od_crawler.config import TRANSPORT_CONNECT_RETRIES, USER_AGENT
from od_crawler.errors import TransportError


def build_session(
    pool_size: int = 20,
    user_agent: str = USER_AGENT,
    verify_ssl: bool = True,
) -> requests.Session:
    """Return a ``requests.Session`` with connection-level retries and a
    keep-alive pool of *pool_size* connections per host.

    Status codes are never retried here: every non-200 answer is handed
    back untouched so the status classifier sees it.
    """
    session = requests.Session()
    retry = Retry(
        total=TRANSPORT_CONNECT_RETRIES,
        connect=TRANSPORT_CONNECT_RETRIES,
        read=0,
        redirect=0,
        status=0,
        backoff_factor=0.5,
        raise_on_status=False,
    )
    adapter = HTTPAdapter(
        max_retries=retry,
        pool_connections=pool_size,
        pool_maxsize=pool_size,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = verify_ssl
    session.headers.update({
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml,*/*;q=0.8",
        "Accept-Encoding": "gzip, deflate",
        "Connection": "keep-alive",
    })
    return session


def fetch(
    session: requests.Session,
    url: str,
    method: str = "GET",
    timeout: float = 10.0,
) -> requests.Response:
    """Issue one request without following redirects.

    Any ``requests`` exception is re-raised as :class:`TransportError`,
    keeping transport failures distinct from HTTP status outcomes.
    """
    try:
        return session.request(
            method, url, timeout=timeout, allow_redirects=False,
        )
    except requests.RequestException as exc:
        raise TransportError(f"{method} {url} failed: {exc}") from exc
