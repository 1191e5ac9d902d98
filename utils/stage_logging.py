import json
import logging
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger("api.stage")


def _norm(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        return value
    return str(value)


def log_stage(
    *,
    card_id: str,
    stage: str,
    event: str,
    label: str | None = None,
    source: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    payload = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "card_id": card_id,
        "stage": stage,
        "event": event.upper(),
    }

    if label:
        payload["label"] = label
    if source:
        payload["source"] = source
    if error:
        payload["error"] = error

    for key, value in extra.items():
        norm = _norm(value)
        if norm is not None:
            payload[key] = norm

    msg = json.dumps(payload, ensure_ascii=False)
    if error or payload["event"] == "FAILED":
        logger.error("stage_event %s", msg)
    else:
        logger.info("stage_event %s", msg)
