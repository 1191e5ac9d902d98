# User value: This file keeps the learned price bands durable so estimates stay calibrated across restarts.
import logging
import os
import tempfile

import config
from services import gcs
from services.redis_client import get_redis_client, ping_with_latency

logger = logging.getLogger("api.precision.store")


def default_file_path(data_dir: str) -> str:
    return os.path.join(data_dir, "analytics", "precision.json")


class LocalFileStore:
    # User value: stores the model on local disk with atomic replace so a reader never sees half a file.
    def __init__(self, path: str):
        self.path = path

    def describe(self) -> str:
        return f"file:{self.path}"

    def read_text(self) -> str:
        with open(self.path, "r", encoding="utf-8") as fh:
            return fh.read()

    def write_text(self, content: str) -> None:
        directory = os.path.dirname(self.path) or "."
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".precision-", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(content)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def is_ready(self) -> bool:
        directory = os.path.dirname(self.path) or "."
        candidate = directory
        while candidate and not os.path.isdir(candidate):
            parent = os.path.dirname(candidate)
            if parent == candidate:
                break
            candidate = parent
        return bool(candidate) and os.access(candidate, os.W_OK)


class RedisStore:
    # User value: shares one learned model across instances through a single Redis key.
    def __init__(self, client, key: str):
        self.client = client
        self.key = key

    def describe(self) -> str:
        return f"redis:{self.key}"

    def read_text(self) -> str:
        raw = self.client.get(self.key)
        if raw is None:
            raise LookupError(f"redis key not found: {self.key}")
        return raw

    def write_text(self, content: str) -> None:
        self.client.set(self.key, content)

    def is_ready(self) -> bool:
        ok, _ = ping_with_latency(self.client)
        return ok


class GcsStore:
    # User value: keeps the learned model in object storage so it outlives any single container.
    def __init__(self, bucket_name: str, blob_path: str):
        self.bucket_name = bucket_name
        self.blob_path = blob_path

    def describe(self) -> str:
        return f"gs://{self.bucket_name}/{self.blob_path}"

    def read_text(self) -> str:
        return gcs.download_text(bucket_name=self.bucket_name, blob_path=self.blob_path)

    def write_text(self, content: str) -> None:
        gcs.upload_json_text(
            bucket_name=self.bucket_name,
            content=content,
            destination_path=self.blob_path,
        )

    def is_ready(self) -> bool:
        return bool(self.bucket_name)


# User value: picks the configured backend so deployments choose durability without code changes.
def build_store(kind: str | None = None):
    selected = (kind or config.PRECISION_STORE or "file").strip().lower()
    if selected == "redis":
        store = RedisStore(get_redis_client(config.REDIS_URL), config.PRECISION_REDIS_KEY)
    elif selected == "gcs":
        store = GcsStore(config.GCS_BUCKET_NAME, config.PRECISION_GCS_PATH)
    elif selected == "file":
        store = LocalFileStore(default_file_path(config.DATA_DIR))
    else:
        raise ValueError(f"Unknown precision store: {selected}")
    logger.info("precision_store_selected kind=%s target=%s", selected, store.describe())
    return store
