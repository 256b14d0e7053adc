"""
Command-line interface for the open-directory crawler.
"""

import argparse
import sys
import threading
import time
from pathlib import Path

from tqdm import tqdm

from od_crawler.config import (
    DEFAULT_COOLDOWN, DEFAULT_OUTPUT, DEFAULT_RECHECK, DEFAULT_RETRIES,
    DEFAULT_TIMEOUT, load_config, parse_workers,
)
from od_crawler.core.context import CrawlContext
from od_crawler.core.orchestrator import Orchestrator, ShutdownController
from od_crawler.core.storage import LocalReportSink, prepare_workdirs
from od_crawler.remote import RemoteTaskSource
from od_crawler.utils.log import log, setup_logging

__version__ = "1.2.2"


def _workers(raw: str) -> int:
    try:
        return parse_workers(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid worker count {raw!r} (use a non-negative number or 'auto')"
        ) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="od-crawler",
        description="Open-directory crawler – rebuilds the file tree of "
                    "web servers exposing raw directory listings.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  od-crawler server --server-url http://od-db.local --token SECRET\n"
            "  od-crawler crawl http://example.com/pub/\n"
            "  od-crawler --workers 4 --timeout 5 crawl example.com/files/\n"
        ),
    )
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--output", default=None,
        help=f"Working directory for crawled/ and queue/ (default: {DEFAULT_OUTPUT})",
    )
    parser.add_argument(
        "--timeout", type=float, default=None,
        help=f"Per-request timeout in seconds (default: {DEFAULT_TIMEOUT})",
    )
    parser.add_argument(
        "--workers", type=_workers, default=None, metavar="N",
        help="Number of parallel workers shared by all tasks, or 'auto' "
             "to detect from CPU/RAM (default: auto)",
    )
    parser.add_argument(
        "--retries", type=int, default=None,
        help=f"Retries for rate-limited (429) requests (default: {DEFAULT_RETRIES})",
    )
    parser.add_argument(
        "--debug", action="store_true",
        help="Enable verbose debug logging",
    )
    parser.add_argument(
        "--log-file",
        help="Write detailed logs to this file (always at DEBUG level)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    server = sub.add_parser(
        "server",
        help="Fetch tasks from the index server and upload the results",
    )
    server.add_argument(
        "--recheck", type=float, default=None,
        help=f"Seconds between task requests (default: {DEFAULT_RECHECK})",
    )
    server.add_argument(
        "--cooldown", type=float, default=None,
        help=f"Seconds to wait after a failed task request (default: {DEFAULT_COOLDOWN})",
    )
    server.add_argument("--server-url", default=None,
                        help="Base URL of the index server")
    server.add_argument("--token", default=None,
                        help="Access token for the index server "
                             "(or set OD_CRAWLER_TOKEN)")

    crawl = sub.add_parser(
        "crawl",
        help="Crawl one URL and save the report under crawled/0.json",
    )
    crawl.add_argument("url", help="Root URL of the open directory")
    return parser


def _overrides(args: argparse.Namespace) -> dict:
    return {
        "timeout": args.timeout,
        "workers": args.workers,
        "retries": args.retries,
        "output_dir": args.output,
        "recheck": getattr(args, "recheck", None),
        "cooldown": getattr(args, "cooldown", None),
        "server_url": getattr(args, "server_url", None),
        "token": getattr(args, "token", None),
    }


def _progress_callback(bar: tqdm):
    lock = threading.Lock()

    def update(stats: dict[str, int]) -> None:
        with lock:
            bar.total = stats["queued"]
            bar.n = stats["done"] + stats["failed"]
            bar.set_postfix(failed=stats["failed"], dup=stats["dup"],
                            refresh=False)
            bar.refresh()

    return update


def cmd_server(ctx: CrawlContext) -> int:
    config = ctx.config
    source = RemoteTaskSource(
        ctx.session, config.server_url, config.token, timeout=config.timeout,
    )
    orchestrator = Orchestrator(ctx, sink=source, source=source)
    shutdown = ShutdownController()
    shutdown.install()
    log.info("Connected to %s with %d workers", config.server_url, config.workers)
    orchestrator.run_server(shutdown.soft)
    return 0


def cmd_crawl(ctx: CrawlContext, crawled: Path, url: str) -> int:
    orchestrator = Orchestrator(ctx, sink=LocalReportSink(crawled))
    shutdown = ShutdownController()
    shutdown.install()
    with tqdm(desc="Crawling", unit="job", dynamic_ncols=True) as bar:
        try:
            report = orchestrator.run_single(
                url, on_progress=_progress_callback(bar), stop=shutdown.soft,
            )
        except ValueError as exc:
            log.error("Cannot crawl %s: %s", url, exc)
            return 2
    log.info("Crawled %d entries, %d failure(s)%s",
             len(report.files), len(report.failures),
             " (interrupted)" if shutdown.soft.is_set() else "")
    return 0


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(debug=args.debug, log_file=args.log_file)

    try:
        config = load_config(_overrides(args))
    except ValueError as exc:
        log.error("Invalid configuration: %s", exc)
        sys.exit(2)

    try:
        crawled, _queue = prepare_workdirs(Path(config.output_dir))
    except OSError as exc:
        log.critical("Cannot create working directories: %s", exc)
        sys.exit(1)

    ctx = CrawlContext.create(config)
    t0 = time.monotonic()
    try:
        if args.command == "server":
            code = cmd_server(ctx)
        else:
            code = cmd_crawl(ctx, crawled, args.url)
    finally:
        ctx.close()
    log.info("Total elapsed time: %.1f s", time.monotonic() - t0)
    sys.exit(code)


if __name__ == "__main__":
    main()
