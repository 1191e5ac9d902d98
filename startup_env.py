import logging
import os
from typing import List

from services.feature_flags import FALSE_VALUES, TRUE_VALUES

logger = logging.getLogger("api.startup")

BOOL_FLAGS = ("FEATURE_DEV_TRAINING", "FEATURE_PRECISION_TIGHTEN")
STORE_KINDS = ("file", "redis", "gcs")


def _is_blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def _validate_redis_url(value: str | None, key: str, errors: List[str]) -> None:
    if _is_blank(value):
        errors.append(f"{key} is required")
        return
    if not (value.startswith("redis://") or value.startswith("rediss://")):
        errors.append(f"{key} must start with redis:// or rediss://")


def _read_float(key: str, default: str, errors: List[str]) -> float | None:
    raw = os.getenv(key, default)
    try:
        return float(raw)
    except (TypeError, ValueError):
        errors.append(f"{key} must be a number: {raw}")
        return None


def _validate_precision_params(errors: List[str]) -> None:
    q_low = _read_float("PRECISION_Q_LOW", "0.2", errors)
    q_high = _read_float("PRECISION_Q_HIGH", "0.8", errors)
    alpha = _read_float("PRECISION_ALPHA", "0.12", errors)
    blend = _read_float("PRECISION_BLEND", "0.6", errors)

    for key, value in (("PRECISION_Q_LOW", q_low), ("PRECISION_Q_HIGH", q_high)):
        if value is not None and not 0.0 < value < 1.0:
            errors.append(f"{key} must be between 0 and 1 (exclusive)")
    if q_low is not None and q_high is not None and not q_low < q_high:
        errors.append("PRECISION_Q_LOW must be less than PRECISION_Q_HIGH")
    if alpha is not None and not 0.0 < alpha <= 1.0:
        errors.append("PRECISION_ALPHA must be in (0, 1]")
    if blend is not None and not 0.0 <= blend <= 1.0:
        errors.append("PRECISION_BLEND must be in [0, 1]")


def _validate_bool_flag_env(key: str, errors: List[str]) -> None:
    raw = os.getenv(key)
    if raw is None:
        return
    if str(raw).strip().lower() not in TRUE_VALUES | FALSE_VALUES:
        errors.append(f"{key} must be one of {sorted(TRUE_VALUES | FALSE_VALUES)}")


def validate_startup_env() -> None:
    errors: List[str] = []
    warnings: List[str] = []

    store = (os.getenv("PRECISION_STORE") or "file").strip().lower()
    if store not in STORE_KINDS:
        errors.append(f"PRECISION_STORE must be one of {list(STORE_KINDS)}")
    if store == "redis":
        _validate_redis_url(os.getenv("REDIS_URL"), "REDIS_URL", errors)
    if store == "gcs":
        if _is_blank(os.getenv("GCS_BUCKET_NAME")):
            errors.append("GCS_BUCKET_NAME is required when PRECISION_STORE=gcs")
        if _is_blank(os.getenv("GOOGLE_APPLICATION_CREDENTIALS_JSON")):
            warnings.append(
                "GOOGLE_APPLICATION_CREDENTIALS_JSON is not set; relying on ambient ADC credentials"
            )

    _validate_precision_params(errors)
    for key in BOOL_FLAGS:
        _validate_bool_flag_env(key, errors)

    if _is_blank(os.getenv("CORS_ALLOW_ORIGINS")):
        warnings.append("CORS_ALLOW_ORIGINS is not set; cross-origin requests will be rejected")

    if errors:
        for err in errors:
            logger.error("startup_env_invalid %s", err)
        raise RuntimeError("Startup env validation failed: " + "; ".join(errors))

    for warning in warnings:
        logger.warning("startup_env_warning %s", warning)

    logger.info("startup_env_validated store=%s", store)
