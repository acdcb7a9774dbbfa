"""
cache_store.py: Namespaced JSON key/value store used as the persisted cache
for the rainfall dataset. Entries live either in a local directory or under
an S3-compatible prefix (``s3://bucket/prefix``), one JSON document per key.

Read failures are reported as a miss and write failures as ``False``; the
caller decides whether a cache problem matters.

Functions:
- get_s3_client()
- read_json_from_path(file_path, local)
- save_json_to_path(data, file_path, local)

Classes:
- JsonCacheStore
"""

import json
import os
from pathlib import Path
from typing import Any, Optional, Tuple

import boto3

from rainwatch.config import CACHE_NAMESPACE, CACHE_URI, get_setting
from rainwatch.utils.log_util import app_logger

logger = app_logger(__name__)

_MISSING = object()


def get_s3_client():
    """Build an S3 client from the ``rainwatch_storage_options`` settings."""
    options = get_setting("rainwatch_storage_options", {}) or {}
    return boto3.client(
        "s3",
        endpoint_url=options.get("ENDPOINT_URL"),
        aws_access_key_id=options.get("ACCESS_KEY_ID"),
        aws_secret_access_key=options.get("SECRET_ACCESS_KEY"),
        region_name="us-east-1",
    )


def split_s3_path(file_path: str) -> Tuple[str, str]:
    """
    Split ``s3://bucket/key/parts`` into (bucket, key).

    :raises ValueError: If the path is not an s3:// URI.
    """
    if not file_path.startswith("s3://"):
        raise ValueError(f"Invalid S3 path: {file_path}")
    bucket, _, key = file_path[len("s3://") :].partition("/")
    return bucket, key


def read_json_from_path(file_path: str, local: bool = False) -> Any:
    """
    Read a JSON document from a local path or S3 URI.

    :param file_path: Full S3 URI or local path.
    :param local: True for a local file.
    :return: Decoded JSON value, or ``_MISSING`` when absent or unreadable.
    """
    if local:
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            logger.debug(f"Local cache file not found: {file_path}")
            return _MISSING
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Unreadable cache file {file_path}: {e}")
            return _MISSING

    try:
        bucket, key = split_s3_path(file_path)
        s3 = get_s3_client()
        obj = s3.get_object(Bucket=bucket, Key=key)
        return json.load(obj["Body"])
    except Exception as e:
        logger.warning(f"Failed to read JSON from {file_path}: {e}")
        return _MISSING


def save_json_to_path(data: Any, file_path: str, local: bool = False) -> bool:
    """
    Save a JSON-serialisable value to a local path or S3 URI.

    :param data: Value to store.
    :param file_path: Destination path or S3 URI.
    :param local: True for a local file.
    :return: True if the save operation was successful, False otherwise.
    """
    if local:
        try:
            Path(file_path).parent.mkdir(parents=True, exist_ok=True)
            tmp_path = f"{file_path}.tmp"
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, file_path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save JSON locally to {file_path}: {e}")
            return False

    try:
        bucket, key = split_s3_path(file_path)
        s3 = get_s3_client()
        s3.put_object(
            Bucket=bucket,
            Key=key,
            Body=json.dumps(data, ensure_ascii=False).encode("utf-8"),
            ContentType="application/json",
        )
        return True
    except Exception as e:
        logger.error(f"Failed to save JSON to {file_path}: {e}")
        return False


class JsonCacheStore:
    """
    Key/value store where each key is a JSON document under
    ``<location>/<namespace>/<key>.json``.
    """

    def __init__(self, location: str = CACHE_URI, namespace: str = CACHE_NAMESPACE):
        self.location = str(location).rstrip("/")
        self.namespace = namespace
        self.local = not self.location.startswith("s3://")

    def path_for(self, key: str) -> str:
        return f"{self.location}/{self.namespace}/{key}.json"

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        value = read_json_from_path(self.path_for(key), local=self.local)
        return default if value is _MISSING else value

    def set(self, key: str, value: Any) -> bool:
        saved = save_json_to_path(value, self.path_for(key), local=self.local)
        if saved:
            logger.debug(f"Cached {self.namespace}/{key}")
        return saved

    def __repr__(self) -> str:
        return f"JsonCacheStore({self.location!r}, namespace={self.namespace!r})"
