"""
Directory-listing fetch: GET the listing, check its status, extract
its children.
"""

import posixpath

import requests

from od_crawler.core.models import File, Job
from od_crawler.core.status import check_status_code
from od_crawler.extraction.links import extract_links
from od_crawler.session import fetch
from od_crawler.utils.url import clean_path, url_path


def get_dir(
    session: requests.Session,
    job: Job,
    timeout: float,
) -> tuple[File, list[str]]:
    """Fetch the listing at ``job.url``.

    Returns the directory's :class:`File` record and its child URLs.
    Raises :class:`~od_crawler.errors.CrawlError` on transport failure
    or a non-200 status.
    """
    cleaned = clean_path(url_path(job.url))
    f = File(
        name=posixpath.basename(cleaned),
        path=cleaned.strip("/"),
        is_dir=True,
    )

    resp = fetch(session, job.url, "GET", timeout)
    check_status_code(resp.status_code)

    return f, extract_links(resp.content, job.url)
