"""
Child-link extraction for open-directory listings.

Only ``<a href>`` anchors are considered.  A candidate survives when it
is a strict path-descendant of the listing it was found on, on the same
scheme and host, and carries no query string or upward traversal.
Descendancy is judged on the percent-decoded, cleaned path: that is the
path the server resolves, so ``%2e%2e/`` counts as ``../``.
"""

import urllib.parse

from bs4 import BeautifulSoup, SoupStrainer

from od_crawler.utils.url import clean_path, tidy_path

# hrefs that point at the listing itself or its parent
_SELF_OR_PARENT = frozenset({"", " ", ".", "..", "/"})

_ANCHORS_ONLY = SoupStrainer("a")


def _anchor_hrefs(body: bytes | str) -> list[str]:
    """Return the first ``href`` of every anchor, in document order.

    Anchors without an ``href`` yield an empty string.  The lxml tree
    builder drops redefined attributes, so the first ``href`` wins.
    """
    soup = BeautifulSoup(body, "lxml", parse_only=_ANCHORS_ONLY)
    hrefs: list[str] = []
    for anchor in soup.find_all("a"):
        href = anchor.get("href") or ""
        if isinstance(href, list):
            href = " ".join(href)
        hrefs.append(href)
    return hrefs


def _resolved_path(raw_path: str) -> str:
    return clean_path(urllib.parse.unquote(raw_path))


def extract_links(body: bytes | str, base_url: str) -> list[str]:
    """
    Return the absolute URLs of the child entries listed in *body*.

    *base_url* is the URL the listing was fetched from.  Links are
    returned in listing order with duplicate slashes and ``.`` segments
    collapsed; siblings are not deduplicated.
    """
    base = urllib.parse.urlsplit(base_url)
    base_scheme = base.scheme.lower()
    base_host = base.netloc.lower()
    base_path = _resolved_path(base.path)
    base_prefix = base_path.rstrip("/") + "/"

    links: list[str] = []
    for href in _anchor_hrefs(body):
        if "?" in href:
            continue
        if href in _SELF_OR_PARENT:
            continue
        if "../" in href:
            continue

        resolved, _frag = urllib.parse.urldefrag(
            urllib.parse.urljoin(base_url, href)
        )
        link = urllib.parse.urlsplit(resolved)
        if link.scheme.lower() != base_scheme or link.netloc.lower() != base_host:
            continue
        link_path = _resolved_path(link.path)
        if link_path == base_path:
            continue
        if not link_path.startswith(base_prefix):
            continue

        links.append(urllib.parse.urlunsplit(
            (link.scheme, link.netloc, tidy_path(link.path), "", "")
        ))
    return links
