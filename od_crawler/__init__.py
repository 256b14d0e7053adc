"""
od_crawler
==========
Crawler for open directories: web servers that expose raw file/folder
listings.  Rebuilds the remote tree and reports every file found
(path, size, last-modified time) to a directory-index server, or to
local storage.

Package structure
-----------------
od_crawler/
├── __init__.py       – package init and public API
├── config.py         – configuration constants and CrawlerConfig
├── errors.py         – outcomes and the CrawlError hierarchy
├── session.py        – requests.Session factory and fetch()
├── remote.py         – task source / report upload client
├── cli.py            – argparse CLI (``python -m od_crawler``)
├── extraction/       – child-link extraction from listings
├── core/             – walker, orchestrator, probes, signatures, storage
└── utils/            – URL helpers and logging

Quick start
-----------
    from od_crawler import CrawlContext, CrawlerConfig, Orchestrator
    from od_crawler.core import LocalReportSink
    from pathlib import Path

    ctx = CrawlContext.create(CrawlerConfig(workers=8))
    report = Orchestrator(ctx, LocalReportSink(Path("crawled"))).run_single(
        "http://example.com/pub/"
    )
    ctx.close()
"""

from .config import CrawlerConfig, load_config
from .core import CrawlContext, File, Orchestrator, Report, Task, TreeWalker
from .core.hashing import hash_dir
from .core.status import check_status_code, classify_status
from .errors import CrawlError, Outcome
from .extraction import extract_links

__all__ = [
    "CrawlerConfig",
    "load_config",
    "CrawlContext",
    "File",
    "Orchestrator",
    "Report",
    "Task",
    "TreeWalker",
    "hash_dir",
    "check_status_code",
    "classify_status",
    "CrawlError",
    "Outcome",
    "extract_links",
]
