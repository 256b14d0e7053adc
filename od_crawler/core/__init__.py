"""Core crawl engine – tree walker, orchestrator and report storage."""

from od_crawler.core.context import CrawlContext
from od_crawler.core.models import File, Job, JobFailure, JobState, Report, Task
from od_crawler.core.orchestrator import Orchestrator, ShutdownController, WaitGroup
from od_crawler.core.storage import LocalReportSink, prepare_workdirs
from od_crawler.core.walker import TreeWalker

__all__ = [
    "CrawlContext",
    "File",
    "Job",
    "JobFailure",
    "JobState",
    "Report",
    "Task",
    "Orchestrator",
    "ShutdownController",
    "WaitGroup",
    "LocalReportSink",
    "prepare_workdirs",
    "TreeWalker",
]
