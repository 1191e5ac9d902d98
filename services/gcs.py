# -*- coding: utf-8 -*-

import os
import json
import base64
from google.cloud import storage

# =========================================================
# LAZY CLIENT
# =========================================================
_client = None


def _get_client():
    global _client
    if _client is not None:
        return _client

    creds_b64 = os.getenv("GOOGLE_APPLICATION_CREDENTIALS_JSON")
    if creds_b64:
        creds = json.loads(base64.b64decode(creds_b64))
        _client = storage.Client.from_service_account_info(creds)
    else:
        _client = storage.Client()

    return _client


# =========================================================
# UPLOAD JSON DOCUMENT
# =========================================================
def upload_json_text(
    *,
    bucket_name: str,
    content: str,
    destination_path: str,
) -> dict:
    if not bucket_name:
        raise RuntimeError("GCS_BUCKET_NAME not set")

    client = _get_client()
    bucket = client.bucket(bucket_name)
    blob = bucket.blob(destination_path)

    # single-object write; readers see the old or the new document, never a mix
    blob.upload_from_string(
        content,
        content_type="application/json; charset=utf-8",
    )

    return {
        "bucket": bucket_name,
        "blob": destination_path,
        "gcs_uri": f"gs://{bucket_name}/{destination_path}",
    }


# =========================================================
# DOWNLOAD JSON DOCUMENT
# =========================================================
def download_text(
    *,
    bucket_name: str,
    blob_path: str,
) -> str:
    """
    Read an object as UTF-8 text. Missing objects raise NotFound.
    """
    if not bucket_name:
        raise RuntimeError("GCS_BUCKET_NAME not set")

    client = _get_client()
    bucket = client.bucket(bucket_name)
    blob = bucket.blob(blob_path)

    return blob.download_as_text(encoding="utf-8")
