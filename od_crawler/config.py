"""
Configuration constants and the runtime configuration object.

Values are resolved in three layers: the defaults below, then
``OD_CRAWLER_<FIELD>`` environment variables, then explicit CLI flags.
"""

import os
from dataclasses import dataclass, fields

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_OUTPUT = "."
DEFAULT_TIMEOUT = 10.0         # seconds per listing GET / metadata HEAD
DEFAULT_RECHECK = 1.0          # seconds between task-source polls
DEFAULT_COOLDOWN = 30.0        # seconds to back off after a failed poll
DEFAULT_RETRIES = 0            # extra attempts on 429; 0 = surface, don't retry
DEFAULT_SERVER_URL = "http://localhost:5000"

CRAWLED_DIR = "crawled"
QUEUE_DIR = "queue"

SUPPORTED_SCHEMES = frozenset({"http", "https"})

# Limits for auto-concurrency calculation
_MIN_WORKERS = 2
_MAX_WORKERS = 64
_RAM_PER_WORKER_MB = 16        # estimated RSS per worker thread


def auto_concurrency() -> int:
    """Calculate the number of concurrent workers from available CPU
    cores and system RAM.

    Heuristic:
      * Start with ``cpu_count * 4`` (workers spend their time waiting
        on the network).
      * Cap by available RAM (``free_mb / _RAM_PER_WORKER_MB``).
      * Clamp between ``_MIN_WORKERS`` and ``_MAX_WORKERS``.
    """
    cpus = os.cpu_count() or 2
    workers = cpus * 4

    try:
        with open("/proc/meminfo") as f:
            for line in f:
                if line.startswith("MemAvailable:"):
                    mem_kb = int(line.split()[1])
                    mem_mb = mem_kb // 1024
                    ram_cap = max(1, mem_mb // _RAM_PER_WORKER_MB)
                    workers = min(workers, ram_cap)
                    break
    except (OSError, ValueError):
        pass

    return max(_MIN_WORKERS, min(workers, _MAX_WORKERS))


def parse_workers(raw: str) -> int:
    """Parse a worker count; ``auto`` (or ``0``) means auto-detect.

    Raises ``ValueError`` for anything that is not a non-negative int.
    """
    raw = raw.strip().lower()
    if raw in ("auto", "0", ""):
        return 0
    value = int(raw)
    if value < 0:
        raise ValueError("worker count must not be negative")
    return value


# ---------------------------------------------------------------------------
# Retry / backoff tuning
# ---------------------------------------------------------------------------
BACKOFF_429_BASE = 2.0         # base seconds for exponential backoff on 429
BACKOFF_429_MAX = 60.0         # cap for 429 backoff
TRANSPORT_CONNECT_RETRIES = 2  # connection-level retries inside the adapter

# ---------------------------------------------------------------------------
# Signature keys
# ---------------------------------------------------------------------------
KEY_SIZE = 8                   # bytes kept from the BLAKE2b-256 digest

USER_AGENT = "od-crawler/1.2.2"

ENV_PREFIX = "OD_CRAWLER_"


@dataclass
class CrawlerConfig:
    """Settings shared by the orchestrator, the tree walkers and the
    remote task source."""

    timeout: float = DEFAULT_TIMEOUT
    recheck: float = DEFAULT_RECHECK
    cooldown: float = DEFAULT_COOLDOWN
    workers: int = 0           # 0 = auto-detect
    retries: int = DEFAULT_RETRIES
    user_agent: str = USER_AGENT
    server_url: str = DEFAULT_SERVER_URL
    token: str = ""
    output_dir: str = DEFAULT_OUTPUT

    def __post_init__(self) -> None:
        if self.workers <= 0:
            self.workers = auto_concurrency()
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.recheck <= 0:
            raise ValueError(f"recheck must be positive, got {self.recheck}")
        if self.cooldown < 0:
            raise ValueError(f"cooldown must not be negative, got {self.cooldown}")
        if self.retries < 0:
            raise ValueError(f"retries must not be negative, got {self.retries}")


_FIELD_PARSERS = {"workers": parse_workers}


def _coerce(name: str, raw: str, default):
    if name in _FIELD_PARSERS:
        return _FIELD_PARSERS[name](raw)
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return raw


def load_config(overrides: dict | None = None,
                environ: dict[str, str] | None = None) -> CrawlerConfig:
    """Build a :class:`CrawlerConfig` from defaults, the environment and
    *overrides*.

    ``None`` values in *overrides* mean "not given on the command line"
    and do not shadow environment values.  Raises ``ValueError`` when an
    environment variable cannot be converted to the field's type.
    """
    environ = os.environ if environ is None else environ
    values: dict = {}
    for f in fields(CrawlerConfig):
        raw = environ.get(ENV_PREFIX + f.name.upper())
        if raw is None or raw == "":
            continue
        try:
            values[f.name] = _coerce(f.name, raw, f.default)
        except ValueError:
            raise ValueError(
                f"Invalid value for {ENV_PREFIX}{f.name.upper()}: {raw!r}"
            ) from None
    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value
    return CrawlerConfig(**values)
