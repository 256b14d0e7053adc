"""
Local storage: working directories and the report sink used by the
``crawl`` command.
"""

import json
import logging
from pathlib import Path

from od_crawler.config import CRAWLED_DIR, QUEUE_DIR
from od_crawler.core.models import Report, Task

log = logging.getLogger("od-crawler")


def save_file(local_path: Path, content: bytes) -> None:
    """Write *content* to *local_path*, creating parent directories."""
    local_path.parent.mkdir(parents=True, exist_ok=True)
    local_path.write_bytes(content)
    log.debug("Saved → %s (%d bytes)", local_path, len(content))


def prepare_workdirs(output_dir: Path) -> tuple[Path, Path]:
    """Create the ``crawled`` and ``queue`` directories under
    *output_dir*.  Raises ``OSError`` when either cannot be created."""
    crawled = output_dir / CRAWLED_DIR
    queue = output_dir / QUEUE_DIR
    crawled.mkdir(parents=True, exist_ok=True)
    queue.mkdir(parents=True, exist_ok=True)
    return crawled, queue


class LocalReportSink:
    """Writes each report to ``<crawled>/<task id>.json`` as JSON Lines
    (one file record per line) plus a ``.summary.json`` next to it."""

    def __init__(self, crawled_dir: Path) -> None:
        self.crawled_dir = crawled_dir

    def path_for(self, task: Task) -> Path:
        return self.crawled_dir / f"{task.id}.json"

    def submit(self, task: Task, report: Report) -> Path:
        path = self.path_for(task)
        save_file(path, report.to_json_lines().encode("utf-8"))
        summary_path = path.with_suffix(".summary.json")
        save_file(
            summary_path,
            json.dumps(report.summary(), indent=2, ensure_ascii=False).encode("utf-8"),
        )
        log.info("[TASK] #%s report saved to %s (%d entries)",
                 task.id, path, len(report.files))
        return path
