# User value: This endpoint turns an upload or an AI guess into a calibrated price band users can act on.
import logging
import mimetypes
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile

import config
from schemas.requests import EstimateRequest
from schemas.responses import EstimateCardResponse, MediaInfo, PriceBandResponse
from services.feature_flags import is_precision_tighten_enabled
from services.inference_stub import infer_from_media
from services.precision_service import PrecisionEstimator, get_precision_estimator
from utils.metrics import incr
from utils.rate_limit import upload_limiter
from utils.request_id import get_request_id
from utils.stage_logging import log_stage

router = APIRouter()
logger = logging.getLogger("api.estimate")


# User value: maps MIME to a media kind so the card shows what the user uploaded.
def _media_kind(mimetype: str) -> str:
    if mimetype.startswith("video/"):
        return "video"
    if mimetype.startswith("audio/"):
        return "audio"
    return "image"


# User value: applies learned bands only when enabled so operators can fall back to raw AI ranges.
def _tightened(estimator: PrecisionEstimator, label: str | None, ai_low, ai_high) -> dict:
    if not is_precision_tighten_enabled():
        return {"low": ai_low, "high": ai_high, "source": "passthrough"}
    return estimator.band(label, ai_low, ai_high)


@router.post("/api/estimate", response_model=PriceBandResponse)
# User value: tightens an externally supplied range for a category without requiring an upload.
def estimate_band(payload: EstimateRequest, estimator: PrecisionEstimator = Depends(get_precision_estimator)):
    band = _tightened(estimator, payload.label, payload.ai_low, payload.ai_high)
    incr("estimate_bands_total", source=band["source"])
    logger.info(
        "estimate_band label=%s ai_low=%s ai_high=%s low=%s high=%s source=%s request_id=%s",
        payload.label,
        payload.ai_low,
        payload.ai_high,
        band["low"],
        band["high"],
        band["source"],
        get_request_id() or "",
    )
    return PriceBandResponse(label=payload.label, **band)


@router.post("/api/jobs/upload", response_model=EstimateCardResponse)
# User value: gives a photo or clip an instant, calibrated price card.
async def upload_estimate(
    request: Request,
    media: UploadFile = File(...),
    estimator: PrecisionEstimator = Depends(get_precision_estimator),
):
    client_ip = request.client.host if request.client else ""
    if not upload_limiter.allow(client_ip):
        incr("estimate_upload_rejected_total", reason="rate_limited")
        raise HTTPException(
            status_code=429,
            detail={"error_code": "RATE_LIMITED", "error_message": "Too many uploads; slow down."},
        )

    mimetype = str(media.content_type or "").strip().lower()
    if mimetype not in config.ALLOWED_MIME:
        incr("estimate_upload_rejected_total", reason="unsupported_type")
        raise HTTPException(
            status_code=415,
            detail={
                "error_code": "UNSUPPORTED_MIME_TYPE",
                "error_message": f"Unsupported media type: {mimetype or 'none'}",
                "allowed": list(config.ALLOWED_MIME),
            },
        )

    limit = config.MAX_UPLOAD_MB * 1024 * 1024
    # Declared size rejects early; the capped read covers bodies that omit or understate it.
    too_large = media.size is not None and media.size > limit
    if not too_large:
        content = await media.read(limit + 1)
        too_large = len(content) > limit
    if too_large:
        incr("estimate_upload_rejected_total", reason="too_large")
        raise HTTPException(
            status_code=413,
            detail={
                "error_code": "UPLOAD_TOO_LARGE",
                "error_message": f"Upload exceeds {config.MAX_UPLOAD_MB} MB.",
            },
        )

    card_id = f"c_{uuid.uuid4().hex}"
    ext = mimetypes.guess_extension(mimetype) or ".bin"
    infer = infer_from_media(f"{card_id}{ext}")
    band = _tightened(estimator, infer["label"], infer["ai_low"], infer["ai_high"])

    log_stage(
        card_id=card_id,
        stage="UPLOAD_ESTIMATE",
        event="COMPLETED",
        label=infer["label"],
        source=band["source"],
        request_id=get_request_id() or "",
        raw_low=infer["ai_low"],
        raw_high=infer["ai_high"],
        low=band["low"],
        high=band["high"],
        size_bytes=len(content),
    )
    incr("estimate_uploads_total", source=band["source"], kind=_media_kind(mimetype))

    return EstimateCardResponse(
        id=card_id,
        created_at=datetime.now(timezone.utc).isoformat(),
        label=infer["label"],
        ai_low=band["low"],
        ai_high=band["high"],
        raw_low=infer["ai_low"],
        raw_high=infer["ai_high"],
        source=band["source"],
        media=MediaInfo(mimetype=mimetype, kind=_media_kind(mimetype)),
    )
