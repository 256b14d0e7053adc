"""
Directory signatures.

A signature fingerprints a directory by its name and the ordered paths
of its children, so the index server can tell an unchanged directory
without diffing its contents.  It is not an identity: collisions only
cost a missed change.
"""

import hashlib
import urllib.parse
from typing import Iterable

from od_crawler.config import KEY_SIZE


def hash_dir(name: str, child_paths: Iterable[str]) -> bytes:
    """Return the ``KEY_SIZE``-byte signature of a directory listing.

    Order-sensitive: the same children listed in a different order give
    a different signature.
    """
    h = hashlib.blake2b(digest_size=32)
    h.update(name.encode("utf-8"))
    for path in child_paths:
        h.update(path.encode("utf-8"))
    return h.digest()[:KEY_SIZE]


def link_paths(links: Iterable[str]) -> list[str]:
    """Path component of each link, as fed to :func:`hash_dir`."""
    return [urllib.parse.urlsplit(link).path for link in links]
