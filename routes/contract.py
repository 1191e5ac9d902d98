# User value: This file tells the capture UI where to send photos and training clips.
from fastapi import APIRouter

import config
from services.feature_flags import is_dev_training_enabled, is_precision_tighten_enabled

router = APIRouter()

CAPTURE_CONFIG_VERSION = 1


@router.get("/api/capture-config")
# User value: keeps the capture UI in sync with the server's endpoints and limits.
def capture_config():
    return {
        "version": CAPTURE_CONFIG_VERSION,
        "endpoints": {
            "photo": {"url": "/api/jobs/upload", "method": "POST", "field": "media", "accept": "image/*"},
            "train": {"url": "/api/train", "method": "POST", "content_type": "application/json"},
            "estimate": {"url": "/api/estimate", "method": "POST", "content_type": "application/json"},
        },
        "limits": {
            "max_upload_mb": config.MAX_UPLOAD_MB,
            "allowed_mime": list(config.ALLOWED_MIME),
        },
        "capabilities": {
            "dev_training_enabled": is_dev_training_enabled(),
            "precision_tighten_enabled": is_precision_tighten_enabled(),
        },
    }
