from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from services.precision_service import PrecisionEstimator, get_precision_estimator

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz():
    return {"ok": True}


@router.get("/readyz")
def readyz(estimator: PrecisionEstimator = Depends(get_precision_estimator)):
    ready = estimator.is_ready()
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"store": estimator.store.describe(), "ready": ready},
    )
