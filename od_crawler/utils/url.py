"""
URL normalisation and path helpers.
"""

import posixpath
import urllib.parse

from od_crawler.config import SUPPORTED_SCHEMES


class UnsupportedSchemeError(ValueError):
    """Raised when a task URL uses a scheme the crawler cannot handle."""

    def __init__(self, scheme: str) -> None:
        super().__init__(f"unsupported URL scheme: {scheme!r}")
        self.scheme = scheme


def clean_path(path: str) -> str:
    """Return *path* with ``.``/``..`` segments resolved and duplicate
    slashes collapsed.  Always absolute; an empty path becomes ``/``."""
    if not path:
        return "/"
    cleaned = posixpath.normpath("/" + path.lstrip("/"))
    return cleaned


def tidy_path(path: str) -> str:
    """:func:`clean_path` that keeps a trailing slash, so directory
    paths stay directory paths."""
    cleaned = clean_path(path)
    if path.endswith("/") and not cleaned.endswith("/"):
        cleaned += "/"
    return cleaned


def url_path(url: str) -> str:
    """Percent-decoded path component of *url*."""
    return urllib.parse.unquote(urllib.parse.urlsplit(url).path)


def url_key(url: str) -> str:
    """Identity of *url* for deduplication.

    Scheme and host are lower-cased and the path is percent-decoded and
    cleaned, so ``/a//b/``, ``/a/./b/`` and ``/a/%62/`` share one key.
    """
    parts = urllib.parse.urlsplit(url)
    path = tidy_path(urllib.parse.unquote(parts.path))
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}{path}"


def is_dir_url(url: str) -> bool:
    """Directory listings are linked with a trailing slash."""
    return urllib.parse.urlsplit(url).path.endswith("/")


def parse_root_url(raw: str) -> str:
    """
    Validate a crawl-root URL and return it in canonical form.

    The scheme and host are lower-cased, the fragment dropped and the
    path forced to end in ``/`` so that every child link is a strict
    path-prefix descendant.

    Raises :class:`UnsupportedSchemeError` for non-HTTP schemes and
    ``ValueError`` when the URL has no host.
    """
    parts = urllib.parse.urlsplit(raw.strip())
    scheme = parts.scheme.lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise UnsupportedSchemeError(scheme)
    if not parts.netloc:
        raise ValueError(f"URL has no host: {raw!r}")
    path = parts.path or "/"
    if not path.endswith("/"):
        path += "/"
    return urllib.parse.urlunsplit(
        (scheme, parts.netloc.lower(), path, parts.query, "")
    )


def normalise_cli_url(raw: str) -> str:
    """Prepend ``http://`` when *raw* carries no scheme, then
    :func:`parse_root_url` it."""
    raw = raw.strip()
    if "://" not in raw:
        raw = "http://" + raw
    return parse_root_url(raw)
