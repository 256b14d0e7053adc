"""
Client for the remote task source.

The directory-index server hands out crawl tasks and receives the
finished reports over plain HTTP:

* ``POST /task/get``    → 200 with ``{"website_id": …, "url": …}``,
  or 204 / 404 when nothing is queued
* ``POST /task/upload`` → multipart upload of the report
"""

import json

import requests

from od_crawler.core.models import Report, Task
from od_crawler.errors import RemoteError
from od_crawler.utils.log import log

_NO_TASK_STATUSES = (204, 404)


class RemoteTaskSource:
    """Fetches tasks from and submits reports to the index server."""

    def __init__(
        self,
        session: requests.Session,
        server_url: str,
        token: str,
        timeout: float = 30.0,
    ) -> None:
        self.session = session
        self.server_url = server_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    def _post(self, endpoint: str, **kwargs) -> requests.Response:
        url = f"{self.server_url}/{endpoint}"
        try:
            return self.session.post(url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise RemoteError(f"POST {url} failed: {exc}") from exc

    def fetch_task(self) -> Task | None:
        """Return the next task, or ``None`` when the queue is empty.

        Raises :class:`RemoteError` on transport failure, an unexpected
        status or a malformed body.
        """
        resp = self._post("task/get", data={"token": self.token})
        if resp.status_code in _NO_TASK_STATUSES:
            return None
        if resp.status_code != 200:
            raise RemoteError(f"task/get returned HTTP {resp.status_code}")
        try:
            data = resp.json()
            task = Task(id=int(data["website_id"]), url=str(data["url"]))
        except (ValueError, KeyError, TypeError) as exc:
            raise RemoteError(f"malformed task: {exc}") from exc
        log.info("[REMOTE] Got task #%s: %s", task.id, task.url)
        return task

    def submit(self, task: Task, report: Report) -> None:
        """Upload *report* for *task*.  Raises :class:`RemoteError`."""
        resp = self._post(
            "task/upload",
            data={
                "token": self.token,
                "website_id": str(task.id),
                "summary": json.dumps(report.summary()),
            },
            files={
                "file_list": (
                    f"{task.id}.json",
                    report.to_json_lines().encode("utf-8"),
                    "application/x-ndjson",
                ),
            },
        )
        if resp.status_code != 200:
            raise RemoteError(f"task/upload returned HTTP {resp.status_code}")
        log.info("[REMOTE] Uploaded task #%s (%d entries)",
                 task.id, len(report.files))
