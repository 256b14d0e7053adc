"""
Crawl orchestrator: acquires tasks, starts a tree walker for each one,
tracks how many are still running and implements the soft / hard
shutdown protocol.
"""

import os
import signal
import threading
from typing import Callable, Protocol

from od_crawler.core.context import CrawlContext
from od_crawler.core.models import Report, Task
from od_crawler.core.walker import TreeWalker
from od_crawler.errors import RemoteError
from od_crawler.utils.log import log
from od_crawler.utils.url import (
    UnsupportedSchemeError, normalise_cli_url, parse_root_url,
)

# seconds between checks of the stop event while a single crawl runs
_STOP_POLL = 0.1


class TaskSource(Protocol):
    def fetch_task(self) -> Task | None: ...


class ReportSink(Protocol):
    def submit(self, task: Task, report: Report) -> object: ...


class WaitGroup:
    """Counter of running tasks that can be waited on until it drains."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._count = 0

    def add(self, n: int = 1) -> None:
        with self._cond:
            if self._count + n < 0:
                raise ValueError("WaitGroup counter went negative")
            self._count += n
            if self._count == 0:
                self._cond.notify_all()

    def done(self) -> None:
        self.add(-1)

    @property
    def value(self) -> int:
        with self._cond:
            return self._count

    def wait(self, timeout: float | None = None) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: self._count == 0, timeout)


class ShutdownController:
    """First SIGINT requests a soft shutdown, the second one exits."""

    def __init__(self, hard_exit: Callable[[int], None] = os._exit) -> None:
        self.soft = threading.Event()
        self._hard_exit = hard_exit
        self._signals = 0

    def install(self) -> None:
        signal.signal(signal.SIGINT, self.handle)

    def handle(self, signum=None, frame=None) -> None:
        self._signals += 1
        if self._signals == 1:
            log.info(">>> Shutting down crawler... <<<")
            self.soft.set()
            return
        log.warning(">>> Force shutdown! <<<")
        self._hard_exit(1)


class Orchestrator:
    def __init__(
        self,
        ctx: CrawlContext,
        sink: ReportSink,
        source: TaskSource | None = None,
    ) -> None:
        self.ctx = ctx
        self.sink = sink
        self.source = source
        self.active = WaitGroup()

    def schedule_task(
        self,
        task: Task,
        on_progress: Callable[[dict[str, int]], None] | None = None,
    ) -> TreeWalker:
        """Start a tree walker for *task* and count it as active."""
        self.active.add()
        walker = TreeWalker(
            self.ctx, task,
            on_complete=self._task_complete,
            on_progress=on_progress,
        )
        try:
            walker.start()
        except Exception:
            self.active.done()
            raise
        return walker

    def _task_complete(self, report: Report) -> None:
        try:
            self.sink.submit(report.task, report)
        except (RemoteError, OSError) as exc:
            log.error("[REMOTE] Could not deliver task #%s: %s",
                      report.task.id, exc)
        finally:
            self.active.done()

    def run_server(self, stop: threading.Event) -> None:
        """Poll the task source every ``recheck`` seconds until *stop*
        is set, then wait for the running walkers to drain."""
        if self.source is None:
            raise RuntimeError("run_server needs a task source")
        config = self.ctx.config

        while not stop.wait(config.recheck):
            try:
                task = self.source.fetch_task()
            except RemoteError as exc:
                log.error("Failed to get new task: %s", exc)
                if stop.wait(config.cooldown):
                    break
                continue

            if task is None:
                if self.active.value == 0:
                    log.info("Waiting …")
                continue

            try:
                root = parse_root_url(task.url)
            except UnsupportedSchemeError as exc:
                log.debug("[SKIP] Task #%s: %s", task.id, exc)
                continue
            except ValueError as exc:
                log.error("Failed to get new task: %s", exc)
                if stop.wait(config.cooldown):
                    break
                continue

            self.schedule_task(Task(id=task.id, url=root))

        pending = self.active.value
        if pending:
            log.info("Waiting for %d running task(s) to finish …", pending)
        self.active.wait()

    def run_single(
        self,
        url: str,
        on_progress: Callable[[dict[str, int]], None] | None = None,
        stop: threading.Event | None = None,
    ) -> Report:
        """Crawl *url* as task ``0`` and block until it completes.

        Setting *stop* cancels the walker's queued Jobs; the partial
        report is still delivered to the sink and returned.
        """
        walker = self.schedule_task(
            Task(id=0, url=normalise_cli_url(url)), on_progress=on_progress,
        )
        if stop is not None:
            while not self.active.wait(_STOP_POLL):
                if stop.is_set():
                    walker.cancel()
                    break
        self.active.wait()
        return walker.report
