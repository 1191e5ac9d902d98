# User value: This file learns per-category price bands from real prices so users see tighter, calibrated estimates.
import logging
import math
import numbers
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

import config
from schemas.precision import DEFAULT_LABEL, LabelStats, PrecisionModel

logger = logging.getLogger("api.precision")

MEAN_SMOOTHING = 0.03


class PrecisionConfig(BaseModel):
    # User value: exposes the tracker knobs so operators can tune how fast bands react to new prices.
    model_config = ConfigDict(frozen=True)

    q_low: float = Field(default=0.2, gt=0.0, lt=1.0)
    q_high: float = Field(default=0.8, gt=0.0, lt=1.0)
    alpha: float = Field(default=0.12, gt=0.0, le=1.0)
    blend: float = Field(default=0.6, ge=0.0, le=1.0)

    @classmethod
    def from_env(cls) -> "PrecisionConfig":
        return cls(
            q_low=config.PRECISION_Q_LOW,
            q_high=config.PRECISION_Q_HIGH,
            alpha=config.PRECISION_ALPHA,
            blend=config.PRECISION_BLEND,
        )


DEFAULT_CONFIG = PrecisionConfig()


# User value: keeps rounding identical to the web client so the same band is shown everywhere.
def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# User value: only real, finite prices are learned so bad input never corrupts a category's band.
def is_finite_price(price) -> bool:
    if isinstance(price, bool) or not isinstance(price, numbers.Real):
        return False
    return math.isfinite(price)


def is_calibrated(stats: Optional[LabelStats]) -> bool:
    if stats is None or not stats.is_warm:
        return False
    if not (math.isfinite(stats.q_low) and math.isfinite(stats.q_high)):
        logger.warning("precision_state_non_finite n=%s", stats.n)
        return False
    return True


def resolve_label(label: Optional[str]) -> str:
    return label or DEFAULT_LABEL


# User value: nudges a streaming quantile estimate toward its target without keeping price history.
def quantile_step(q: Optional[float], p: float, x: float, a: float) -> float:
    if q is None:
        return float(x)
    below = 1.0 if x < q else 0.0
    # Deliberately (p - below), the Robbins-Monro orientation; the (below - p) form diverges.
    return q + a * (p - below) * max(1.0, abs(x - q))


# User value: absorbs one verified price so future estimates for this category get sharper.
def update(model: PrecisionModel, label: Optional[str], price, cfg: PrecisionConfig = DEFAULT_CONFIG) -> PrecisionModel:
    if not is_finite_price(price):
        logger.debug("precision_update_skipped reason=non_finite_price label=%s", label)
        return model

    key = resolve_label(label)
    stats = model.labels.get(key)
    if stats is None:
        stats = LabelStats()
    x = float(price)

    stats.n += 1
    stats.q_low = quantile_step(stats.q_low, cfg.q_low, x, cfg.alpha)
    stats.q_high = quantile_step(stats.q_high, cfg.q_high, x, cfg.alpha)
    stats.mean = x if stats.mean is None else stats.mean + MEAN_SMOOTHING * (x - stats.mean)

    model.labels[key] = stats
    return model


# User value: blends learned bands with the AI guess so users get a narrower range that never collapses.
def tighten(model: PrecisionModel, label: Optional[str], ai_low, ai_high, cfg: PrecisionConfig = DEFAULT_CONFIG) -> dict:
    stats = model.labels.get(label) if label is not None else None
    if not is_calibrated(stats):
        return {"low": ai_low, "high": ai_high}

    q_low = round_half_up(stats.q_low)
    q_high = round_half_up(stats.q_high)
    low = round_half_up(cfg.blend * q_low + (1 - cfg.blend) * ai_low)
    high = round_half_up(cfg.blend * q_high + (1 - cfg.blend) * ai_high)
    # Crossed or tied blends still yield a strict band.
    return {"low": min(low, high - 1), "high": high}


# Load never raises: a missing or damaged document means a cold start, not an outage.
def load(store) -> PrecisionModel:
    try:
        raw = store.read_text()
        model = PrecisionModel.model_validate_json(raw)
    except Exception as e:
        logger.warning(
            "precision_load_fallback store=%s error=%s: %s",
            store.describe(),
            e.__class__.__name__,
            e,
        )
        return PrecisionModel()
    logger.info("precision_loaded store=%s labels=%s", store.describe(), len(model.labels))
    return model


# Save is loud: storage errors reach the caller.
def save(store, model: PrecisionModel) -> None:
    store.write_text(model.to_json())
    logger.info("precision_saved store=%s labels=%s", store.describe(), len(model.labels))
