"""
Tree walker: crawls one task's subtree on the shared worker pool.

Every URL becomes a :class:`Job`.  Directory Jobs (URLs ending in ``/``)
fetch their listing and enqueue one Job per surviving child link; file
Jobs issue a HEAD probe.  A Job's failure is recorded and never stops
its siblings; the task completes once the counter of outstanding Jobs
reaches zero, whatever mix of successes and failures that took.
"""

import threading
import time
from datetime import datetime, timezone
from typing import Callable

from od_crawler.config import BACKOFF_429_BASE, BACKOFF_429_MAX
from od_crawler.core.context import CrawlContext
from od_crawler.core.hashing import hash_dir, link_paths
from od_crawler.core.listing import get_dir
from od_crawler.core.models import File, Job, JobFailure, JobState, Report, Task
from od_crawler.core.probe import get_file
from od_crawler.core.status import should_retry
from od_crawler.errors import CrawlError
from od_crawler.utils.log import log
from od_crawler.utils.url import is_dir_url, url_key


class TreeWalker:
    """
    Crawls the subtree under ``task.url``.

    *on_complete* is called with the finished :class:`Report` from the
    worker thread that retired the last Job, before :meth:`wait`
    returns.  *on_progress* is called with a stats snapshot after each
    Job, while the walker holds its lock; apart from :meth:`cancel` it
    must not call back into the walker.

    :meth:`cancel` stops the crawl softly.  Jobs already fetching finish;
    queued Jobs are recorded as ``cancelled`` without a request, so the
    task still completes with its partial report.
    """

    def __init__(
        self,
        ctx: CrawlContext,
        task: Task,
        on_complete: Callable[[Report], None] | None = None,
        on_progress: Callable[[dict[str, int]], None] | None = None,
    ) -> None:
        self.ctx = ctx
        self.task = task
        self.report = Report(task=task)
        self._on_complete = on_complete
        self._on_progress = on_progress

        self._lock = threading.Lock()
        self._done = threading.Event()
        self._cancelled = threading.Event()
        self._seen: set[str] = set()
        self._states: dict[str, JobState] = {}
        self._pending = 0
        self._stats = {"queued": 0, "done": 0, "failed": 0, "dup": 0}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> None:
        self.report.started_at = datetime.now(timezone.utc)
        log.info("[TASK] #%s started: %s", self.task.id, self.task.url)
        self._enqueue(Job(url=self.task.url, task=self.task))

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the task completes; ``False`` on timeout."""
        return self._done.wait(timeout)

    def cancel(self) -> None:
        """Stop issuing requests for this task."""
        if not self._cancelled.is_set():
            log.info("[TASK] #%s cancelling queued jobs", self.task.id)
        self._cancelled.set()

    @property
    def done(self) -> bool:
        return self._done.is_set()

    @property
    def stats(self) -> dict[str, int]:
        with self._lock:
            return dict(self._stats)

    def job_state(self, url: str) -> JobState | None:
        with self._lock:
            return self._states.get(url)

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def _enqueue(self, job: Job) -> bool:
        """Hand *job* to the pool unless its URL was already seen."""
        key = url_key(job.url)
        with self._lock:
            if key in self._seen:
                self._stats["dup"] += 1
                return False
            self._seen.add(key)
            self._states[job.url] = JobState.PENDING
            self._pending += 1
            self._stats["queued"] += 1

        try:
            self.ctx.pool.submit(self._run_job, job)
        except RuntimeError as exc:
            # Pool already shut down: the Job can never run.
            self._record_failure(job, "cancelled", None, str(exc))
            self._finish_job(job, JobState.FAILED)
        return True

    def _run_job(self, job: Job) -> None:
        state = JobState.FAILED
        try:
            if self._cancelled.is_set():
                self._record_failure(job, "cancelled", None, "task cancelled")
            else:
                state = self._process(job)
        except CrawlError as exc:
            log.debug("[FAIL] %s – %s", job.url, exc)
            self._record_failure(job, exc.outcome.value, exc.code, str(exc))
        except Exception as exc:
            log.exception("[FAIL] Unexpected error on %s", job.url)
            self._record_failure(job, "error", None, repr(exc))
        finally:
            self._finish_job(job, state)

    def _finish_job(self, job: Job, state: JobState) -> None:
        with self._lock:
            self._states[job.url] = state
            self._pending -= 1
            if state is JobState.FAILED:
                self._stats["failed"] += 1
            else:
                self._stats["done"] += 1
            last = self._pending == 0
            if self._on_progress is not None:
                self._on_progress(dict(self._stats))

        if last:
            self._complete()

    def _complete(self) -> None:
        report = self.report
        report.finished_at = datetime.now(timezone.utc)
        report.stats = self.stats
        report.stats["files"] = sum(1 for f in report.files if not f.is_dir)
        report.stats["dirs"] = sum(1 for f in report.files if f.is_dir)
        log.info(
            "[TASK] #%s complete. files=%d  dirs=%d  failed=%d  "
            "in %.1f s",
            self.task.id,
            report.stats["files"],
            report.stats["dirs"],
            report.stats["failed"],
            (report.finished_at - report.started_at).total_seconds(),
        )
        try:
            if self._on_complete is not None:
                self._on_complete(report)
        finally:
            self._done.set()

    # ------------------------------------------------------------------
    # Job processing
    # ------------------------------------------------------------------

    def _set_state(self, job: Job, state: JobState) -> None:
        with self._lock:
            self._states[job.url] = state

    def _process(self, job: Job) -> JobState:
        self._set_state(job, JobState.FETCHING)
        timeout = self.ctx.config.timeout
        session = self.ctx.session

        if not is_dir_url(job.url):
            f = self._with_retry(job, get_file, session, job.url, timeout)
            self._set_state(job, JobState.PROBED)
            self._add_file(f)
            log.debug("[FILE] %s (%d bytes)", job.url, f.size)
            return JobState.DONE

        f, links = self._with_retry(job, get_dir, session, job, timeout)
        self._set_state(job, JobState.EXPANDING)

        f.signature = hash_dir(f.name, link_paths(links)).hex()
        if job.url == self.task.url:
            self.report.signature = f.signature
        else:
            self._add_file(f)

        added = 0
        for link in links:
            if self._enqueue(Job(url=link, task=self.task)):
                added += 1
        log.debug("[DIR] %s (+%d jobs)", job.url, added)
        return JobState.DONE

    def _with_retry(self, job: Job, fn, *args):
        """Call *fn* until it succeeds or the retry policy gives up."""
        retries = self.ctx.config.retries
        attempt = 1
        while True:
            try:
                return fn(*args)
            except CrawlError as exc:
                if not should_retry(exc.outcome, attempt, retries):
                    raise
                wait = min(BACKOFF_429_BASE * 2 ** (attempt - 1), BACKOFF_429_MAX)
                log.warning("[429] Rate limited on %s – retry %d/%d in %.1f s",
                            job.url, attempt, retries, wait)
                time.sleep(wait)
                attempt += 1

    def _add_file(self, f: File) -> None:
        with self._lock:
            self.report.files.append(f)

    def _record_failure(self, job: Job, outcome: str,
                        code: int | None, error: str) -> None:
        with self._lock:
            self.report.failures.append(
                JobFailure(url=job.url, outcome=outcome, code=code, error=error)
            )
