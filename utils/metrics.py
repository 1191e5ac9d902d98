import logging
import threading
from typing import Any

logger = logging.getLogger("api.metrics")

_LOCK = threading.Lock()
_COUNTERS: dict[tuple, float] = {}
_TIMINGS: dict[tuple, dict] = {}


def _key(name: str, labels: dict[str, Any]) -> tuple:
    return (name,) + tuple(sorted((k, str(v)) for k, v in labels.items()))


def incr(name: str, amount: float = 1, **labels: Any) -> None:
    key = _key(name, labels)
    with _LOCK:
        _COUNTERS[key] = _COUNTERS.get(key, 0) + amount


def observe_ms(name: str, value_ms: float, **labels: Any) -> None:
    key = _key(name, labels)
    with _LOCK:
        agg = _TIMINGS.setdefault(key, {"count": 0, "sum_ms": 0.0, "max_ms": 0.0})
        agg["count"] += 1
        agg["sum_ms"] += float(value_ms)
        agg["max_ms"] = max(agg["max_ms"], float(value_ms))


def counter_value(name: str, **labels: Any) -> float:
    with _LOCK:
        return _COUNTERS.get(_key(name, labels), 0)


def snapshot() -> dict:
    with _LOCK:
        counters = [
            {"name": k[0], "labels": dict(k[1:]), "value": v}
            for k, v in _COUNTERS.items()
        ]
        timings = [
            {"name": k[0], "labels": dict(k[1:]), **agg}
            for k, agg in _TIMINGS.items()
        ]
    return {"counters": counters, "timings": timings}


def reset() -> None:
    with _LOCK:
        _COUNTERS.clear()
        _TIMINGS.clear()
    logger.debug("metrics_reset")
