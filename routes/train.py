# User value: This endpoint feeds verified prices back into the model so future estimates get tighter.
import logging

from fastapi import APIRouter, Depends, HTTPException

from schemas.precision import DEFAULT_LABEL
from schemas.requests import TrainRequest
from schemas.responses import LearnedPrice, TrainResponse
from services.estimate_extract import extract_fields
from services.feature_flags import is_dev_training_enabled
from services.precision import is_finite_price
from services.precision_service import PrecisionEstimator, get_precision_estimator
from utils.metrics import incr
from utils.request_id import get_request_id
from utils.stage_logging import log_stage

router = APIRouter()
logger = logging.getLogger("api.train")

MAX_LABEL_LEN = 64
MAX_DESCRIPTION_LEN = 4000


# User value: prefers the stated price and falls back to a budget hint so useful feedback is not dropped.
def _ground_truth(price_usd, fields: dict):
    if is_finite_price(price_usd):
        return price_usd
    hint = fields.get("budget_hint_usd")
    if is_finite_price(hint):
        return hint
    return None


@router.post("/api/train", response_model=TrainResponse)
# User value: records a verified price for a category and persists what was learned.
def train(payload: TrainRequest, estimator: PrecisionEstimator = Depends(get_precision_estimator)):
    if not is_dev_training_enabled():
        raise HTTPException(
            status_code=403,
            detail={"error_code": "TRAINING_DISABLED", "error_message": "Training is disabled"},
        )

    request_id = get_request_id() or ""
    label = (payload.label or DEFAULT_LABEL)[:MAX_LABEL_LEN]
    description = str(payload.description or "")[:MAX_DESCRIPTION_LEN]
    fields = extract_fields(description)
    gt = _ground_truth(payload.price_usd, fields)

    if gt is None:
        incr("train_requests_total", learned="false")
        log_stage(card_id="train", stage="TRAIN_UPDATE", event="SKIPPED", label=label, request_id=request_id)
        return TrainResponse(ok=True, learned=None, fields=fields)

    try:
        estimator.observe(label, gt)
    except Exception as e:
        log_stage(
            card_id="train",
            stage="TRAIN_UPDATE",
            event="FAILED",
            label=label,
            error=f"{e.__class__.__name__}: {e}",
            request_id=request_id,
        )
        raise HTTPException(
            status_code=500,
            detail={
                "error_code": "PRECISION_SAVE_FAILED",
                "error_message": "Price was learned in memory but could not be persisted",
            },
        ) from e

    incr("train_requests_total", learned="true")
    log_stage(
        card_id="train",
        stage="TRAIN_UPDATE",
        event="COMPLETED",
        label=label,
        source="price" if is_finite_price(payload.price_usd) else "budget_hint",
        request_id=request_id,
        price_usd=gt,
    )
    return TrainResponse(ok=True, learned=LearnedPrice(label=label, price_usd=gt), fields=fields)
