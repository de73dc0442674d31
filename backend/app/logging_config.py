import logging
import os
import time
from contextlib import contextmanager
from typing import Dict, Union


def _level_from_env(default: int = logging.INFO) -> int:
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "").strip().upper())
    return level if isinstance(level, int) else default


logging.basicConfig(
    level=_level_from_env(),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
# httpx logs every request line (with query strings) at INFO.
for _noisy in ("httpx", "httpcore"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)

log = logging.getLogger("tubemaster")

MetricValue = Union[int, float]
_metrics: Dict[str, MetricValue] = {}


def inc_metric(name: str, amount: int = 1) -> None:
    _metrics[name] = int(_metrics.get(name, 0)) + amount


def set_metric(name: str, value: MetricValue) -> None:
    _metrics[name] = value


def get_metrics_snapshot() -> Dict[str, MetricValue]:
    return dict(sorted(_metrics.items()))


def reset_metrics() -> None:
    _metrics.clear()


@contextmanager
def measure(name: str):
    """
    Time a block. Keeps the last and the slowest duration plus a call
    count, so `/metrics` shows provider latency without a metrics backend.
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = round((time.perf_counter() - start) * 1000, 1)
        log.debug(f"⏱️ {name} took {elapsed_ms}ms")
        inc_metric(f"timed_calls_{name}")
        set_metric(f"time_ms_last_{name}", elapsed_ms)
        set_metric(f"time_ms_max_{name}", max(_metrics.get(f"time_ms_max_{name}", 0.0), elapsed_ms))
