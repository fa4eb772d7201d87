import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.config import settings
from app.errors import StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)

DOCUMENTS_PREFIX = "pdfs/"


@dataclass(frozen=True)
class StoredObject:
    key: str
    last_modified: datetime


class ObjectStore:
    """Content storage capability consumed by the upload pipeline.

    ``put`` is idempotent for a given key: writing the same bytes under the
    same key again leaves the store unchanged.
    """

    @staticmethod
    def generate_storage_key(document_id: str) -> str:
        return f"{DOCUMENTS_PREFIX}{document_id}.pdf"

    def put(self, key: str, data: bytes, content_type: str) -> str:
        raise NotImplementedError

    def get(self, key: str) -> bytes:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def list_objects(self, prefix: str = DOCUMENTS_PREFIX) -> list[StoredObject]:
        raise NotImplementedError


class S3ObjectStore(ObjectStore):
    def __init__(self, bucket: str | None = None, client=None):
        self.bucket = bucket or settings.s3_bucket_name
        self._client = client

    @staticmethod
    def is_configured() -> bool:
        return bool(
            settings.s3_endpoint_url
            and settings.s3_access_key
            and settings.s3_secret_key
        )

    def _get_client(self):  # type: ignore[return]
        if self._client is not None:
            return self._client
        if not S3ObjectStore.is_configured():
            raise RuntimeError(
                "S3 storage is not configured. "
                "Set S3_ENDPOINT_URL, S3_ACCESS_KEY, and S3_SECRET_KEY."
            )
        self._client = boto3.client(
            "s3",
            endpoint_url=settings.s3_endpoint_url,
            aws_access_key_id=settings.s3_access_key,
            aws_secret_access_key=settings.s3_secret_key,
            region_name=settings.s3_region,
            config=Config(signature_version="s3v4"),
        )
        return self._client

    def _object_url(self, key: str) -> str:
        return f"{settings.s3_endpoint_url.rstrip('/')}/{self.bucket}/{key}"

    def put(self, key: str, data: bytes, content_type: str) -> str:
        client = self._get_client()
        try:
            client.put_object(
                Bucket=self.bucket, Key=key, Body=data, ContentType=content_type
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 put_object failed for %s: %s", key, e)
            raise StorageWriteError() from e
        return self._object_url(key)

    def get(self, key: str) -> bytes:
        client = self._get_client()
        try:
            response = client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 get_object failed for %s: %s", key, e)
            raise StorageReadError() from e

    def delete(self, key: str) -> None:
        client = self._get_client()
        client.delete_object(Bucket=self.bucket, Key=key)

    def list_objects(self, prefix: str = DOCUMENTS_PREFIX) -> list[StoredObject]:
        client = self._get_client()
        paginator = client.get_paginator("list_objects_v2")
        objects = []
        for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
            for item in page.get("Contents", []):
                objects.append(
                    StoredObject(key=item["Key"], last_modified=item["LastModified"])
                )
        return objects


class LocalObjectStore(ObjectStore):
    def __init__(self, root: str | Path | None = None, url_prefix: str | None = None):
        self.root = Path(root or settings.local_storage_dir)
        self.url_prefix = url_prefix or settings.local_storage_url_prefix

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root.resolve()):
            raise ValueError(f"Storage key escapes the storage root: {key}")
        return path

    def put(self, key: str, data: bytes, content_type: str) -> str:
        path = self._path(key)
        tmp_path = path.with_name(path.name + ".part")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error("Local write failed for %s: %s", key, e)
            raise StorageWriteError() from e
        return f"{self.url_prefix}/{key}"

    def get(self, key: str) -> bytes:
        try:
            return self._path(key).read_bytes()
        except OSError as e:
            logger.error("Local read failed for %s: %s", key, e)
            raise StorageReadError() from e

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def list_objects(self, prefix: str = DOCUMENTS_PREFIX) -> list[StoredObject]:
        base = self.root / prefix
        if not base.is_dir():
            return []
        objects = []
        for path in sorted(base.rglob("*")):
            if not path.is_file() or path.name.endswith(".part"):
                continue
            mtime = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
            key = path.relative_to(self.root).as_posix()
            objects.append(StoredObject(key=key, last_modified=mtime))
        return objects


def get_object_store() -> ObjectStore:
    if S3ObjectStore.is_configured():
        return S3ObjectStore()
    return LocalObjectStore()
