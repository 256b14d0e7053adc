"""
Value types shared by the walker, the orchestrator and the report sinks.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

# Last-Modified formats, tried in order.  Each entry is a strptime
# pattern and the slice of the header value it is applied to.
_MTIME_FORMATS: list[tuple[str, slice]] = [
    ("%a, %d %b %Y %H:%M:%S %Z", slice(None)),   # RFC 1123
    ("%A, %d-%b-%y %H:%M:%S %Z", slice(None)),   # RFC 850
    ("%Y-%m-%d", slice(0, 10)),                   # bare date prefix
]
# TODO: asctime dates ("Sun Nov  6 08:49:37 1994") are still unparsed.


@dataclass(frozen=True)
class Task:
    """One crawl assignment handed out by the task source."""

    id: int
    url: str


@dataclass(frozen=True)
class Job:
    """A single URL to fetch within the subtree of *task*."""

    url: str
    task: Task


class JobState(Enum):
    PENDING = "pending"
    FETCHING = "fetching"
    EXPANDING = "expanding"
    PROBED = "probed"
    DONE = "done"
    FAILED = "failed"


@dataclass
class File:
    """A file or directory found while crawling."""

    name: str = ""
    path: str = ""
    is_dir: bool = False
    size: int = -1
    mtime: datetime | None = None
    signature: str = ""

    def apply_content_length(self, value: str | None) -> None:
        """Set :attr:`size` from a Content-Length header value.

        Only plain ASCII digits are accepted; anything else leaves the
        size untouched.
        """
        if not value or not (value.isascii() and value.isdigit()):
            return
        self.size = int(value)

    def apply_last_modified(self, value: str | None) -> None:
        """Set :attr:`mtime` from a Last-Modified header value.

        Tries RFC 1123, RFC 850 and a bare ``YYYY-MM-DD`` prefix in that
        order; the first match wins.  Unparseable values leave the
        modification time untouched.
        """
        if not value:
            return
        value = value.strip()
        for fmt, part in _MTIME_FORMATS:
            try:
                parsed = datetime.strptime(value[part], fmt)
            except ValueError:
                continue
            self.mtime = parsed.replace(tzinfo=timezone.utc)
            return

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "path": self.path,
            "is_dir": self.is_dir,
            "size": self.size,
            "mtime": int(self.mtime.timestamp()) if self.mtime else None,
        }
        if self.signature:
            data["signature"] = self.signature
        return data


@dataclass(frozen=True)
class JobFailure:
    """A Job that ended in :attr:`JobState.FAILED`."""

    url: str
    outcome: str
    code: int | None = None
    error: str = ""

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "outcome": self.outcome,
            "code": self.code,
            "error": self.error,
        }


@dataclass
class Report:
    """Everything a finished Task produced, including partial results."""

    task: Task
    files: list[File] = field(default_factory=list)
    failures: list[JobFailure] = field(default_factory=list)
    stats: dict[str, int] = field(default_factory=dict)
    signature: str = ""
    started_at: datetime | None = None
    finished_at: datetime | None = None

    def summary(self) -> dict:
        elapsed = None
        if self.started_at and self.finished_at:
            elapsed = (self.finished_at - self.started_at).total_seconds()
        return {
            "website_id": self.task.id,
            "url": self.task.url,
            "signature": self.signature,
            "file_count": sum(1 for f in self.files if not f.is_dir),
            "dir_count": sum(1 for f in self.files if f.is_dir),
            "failures": [fail.to_dict() for fail in self.failures],
            "stats": dict(self.stats),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "elapsed": elapsed,
        }

    def to_json_lines(self) -> str:
        """One JSON-encoded :class:`File` per line."""
        return "".join(
            json.dumps(f.to_dict(), ensure_ascii=False) + "\n"
            for f in self.files
        )
