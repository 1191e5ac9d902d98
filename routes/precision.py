from fastapi import APIRouter, Depends

from services.precision_service import PrecisionEstimator, get_precision_estimator

router = APIRouter(prefix="/api/precision", tags=["precision"])


@router.get("/labels")
def precision_labels(estimator: PrecisionEstimator = Depends(get_precision_estimator)):
    return estimator.snapshot()
