import os
from dotenv import load_dotenv

load_dotenv()

DATA_DIR = os.environ.get("DATA_DIR", os.path.join(os.path.dirname(os.path.abspath(__file__)), "data"))

PRECISION_STORE = os.environ.get("PRECISION_STORE", "file").strip().lower()
PRECISION_Q_LOW = float(os.environ.get("PRECISION_Q_LOW", "0.2"))
PRECISION_Q_HIGH = float(os.environ.get("PRECISION_Q_HIGH", "0.8"))
PRECISION_ALPHA = float(os.environ.get("PRECISION_ALPHA", "0.12"))
PRECISION_BLEND = float(os.environ.get("PRECISION_BLEND", "0.6"))
PRECISION_REDIS_KEY = os.environ.get("PRECISION_REDIS_KEY", "precision:model")
PRECISION_GCS_PATH = os.environ.get("PRECISION_GCS_PATH", "analytics/precision.json")

REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
GCS_BUCKET_NAME = os.environ.get("GCS_BUCKET_NAME", "")

MAX_UPLOAD_MB = int(os.environ.get("MAX_UPLOAD_MB", "20"))
ALLOWED_MIME = [
    x.strip()
    for x in os.environ.get("ALLOWED_MIME", "image/jpeg,image/png,image/webp,video/mp4,audio/mpeg").split(",")
    if x.strip()
]
RATE_LIMIT_WINDOW_SEC = int(os.environ.get("RATE_LIMIT_WINDOW_SEC", "60"))
RATE_LIMIT_MAX = int(os.environ.get("RATE_LIMIT_MAX", "150"))
