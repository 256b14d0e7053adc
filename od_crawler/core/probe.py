"""
Metadata probe for a single file: a HEAD request and tolerant parsing
of Content-Length and Last-Modified.
"""

import posixpath

import requests

from od_crawler.core.models import File
from od_crawler.core.status import check_status_code
from od_crawler.session import fetch
from od_crawler.utils.url import clean_path, url_path


def get_file(session: requests.Session, url: str, timeout: float) -> File:
    """HEAD *url* and return its :class:`File` record.

    Only a transport failure or a non-200 status raises; header values
    that do not parse simply leave the matching field unset.
    """
    cleaned = clean_path(url_path(url))
    f = File(
        name=posixpath.basename(cleaned),
        path=cleaned.strip("/"),
        is_dir=False,
    )

    resp = fetch(session, url, "HEAD", timeout)
    check_status_code(resp.status_code)

    f.apply_content_length(resp.headers.get("content-length"))
    f.apply_last_modified(resp.headers.get("last-modified"))
    return f
