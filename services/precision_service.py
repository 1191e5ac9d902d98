# User value: This file gives every request one consistent view of the learned price bands.
import logging
import threading

from fastapi import HTTPException, Request

from schemas.precision import PrecisionModel
from services import precision
from services.precision import PrecisionConfig
from utils.metrics import incr

logger = logging.getLogger("api.precision")


class PrecisionEstimator:
    """Single owner of the in-memory precision model.

    Route handlers may run on worker threads, so every read and mutation of
    the model goes through ``_lock``. ``observe`` keeps the lock across the
    save so the stored document always matches a state that existed in memory.
    """

    def __init__(self, store, cfg: PrecisionConfig | None = None, model: PrecisionModel | None = None):
        self.store = store
        self.cfg = cfg or PrecisionConfig()
        self._model = model if model is not None else PrecisionModel()
        self._lock = threading.Lock()

    @classmethod
    def from_store(cls, store, cfg: PrecisionConfig | None = None) -> "PrecisionEstimator":
        return cls(store, cfg=cfg, model=precision.load(store))

    # User value: learns from a verified price and persists it so the lesson survives a restart.
    def observe(self, label: str | None, price, *, persist: bool = True) -> bool:
        if not precision.is_finite_price(price):
            incr("precision_updates_rejected_total", reason="non_finite_price")
            return False

        key = precision.resolve_label(label)
        with self._lock:
            precision.update(self._model, key, price, self.cfg)
            if persist:
                precision.save(self.store, self._model)
            n = self._model.labels[key].n

        incr("precision_updates_total", label=key)
        logger.info("precision_observed label=%s n=%s persisted=%s", key, n, persist)
        return True

    # User value: returns a calibrated band for the category, or the AI guess while the model is cold.
    def band(self, label: str | None, ai_low, ai_high) -> dict:
        with self._lock:
            stats = self._model.labels.get(label) if label is not None else None
            warm = precision.is_calibrated(stats)
            if warm:
                out = precision.tighten(self._model, label, ai_low, ai_high, self.cfg)
            else:
                out = {"low": ai_low, "high": ai_high}
        source = "model" if warm else "passthrough"
        incr("precision_tighten_total", source=source)
        return {**out, "source": source}

    # User value: exposes per-category stats so operators can see what the model has learned.
    def snapshot(self) -> dict:
        with self._lock:
            return self._model.to_document()

    def is_ready(self) -> bool:
        return self.store.is_ready()


# User value: hands each request the app's single estimator so no handler builds its own copy.
def get_precision_estimator(request: Request) -> PrecisionEstimator:
    estimator = getattr(request.app.state, "precision", None)
    if estimator is None:
        raise HTTPException(
            status_code=503,
            detail={
                "error_code": "PRECISION_NOT_READY",
                "error_message": "Precision model is not initialized",
            },
        )
    return estimator
