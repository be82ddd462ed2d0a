from __future__ import annotations

import logging

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from ..base import BackendError, ObjectNotFoundError, ObjectStorage

logger = logging.getLogger(__name__)

_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class S3Storage(ObjectStorage):
    """S3-compatible object storage (AWS, MinIO, DigitalOcean Spaces, hosted BaaS S3 gateways).

    ``bucket_map`` lets the logical bucket names used by the workflows point at
    differently named physical buckets.
    """

    def __init__(
        self,
        *,
        region: str | None = None,
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        bucket_map: dict[str, str] | None = None,
        session: aioboto3.Session | None = None,
    ):
        self._session = session or aioboto3.Session()
        self._client_kwargs = {
            k: v
            for k, v in {
                "region_name": region,
                "endpoint_url": endpoint_url,
                "aws_access_key_id": access_key,
                "aws_secret_access_key": secret_key,
            }.items()
            if v is not None
        }
        self._bucket_map = bucket_map or {}

    def _bucket(self, bucket: str) -> str:
        return self._bucket_map.get(bucket, bucket)

    def _client(self):
        return self._session.client("s3", **self._client_kwargs)

    async def put_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        try:
            async with self._client() as s3:
                await s3.put_object(
                    Bucket=self._bucket(bucket),
                    Key=key,
                    Body=data,
                    ContentType=content_type,
                )
        except (ClientError, BotoCoreError) as exc:
            raise BackendError(f"Upload of {key} failed: {exc}", operation="put_object") from exc
        return key

    async def get_object(self, bucket: str, key: str) -> bytes:
        try:
            async with self._client() as s3:
                response = await s3.get_object(Bucket=self._bucket(bucket), Key=key)
                async with response["Body"] as stream:
                    return await stream.read()
        except ClientError as exc:
            if _error_code(exc) in _MISSING_CODES:
                raise ObjectNotFoundError(f"Object not found: {key}", operation="get_object") from exc
            raise BackendError(f"Download of {key} failed: {exc}", operation="get_object") from exc
        except BotoCoreError as exc:
            raise BackendError(f"Download of {key} failed: {exc}", operation="get_object") from exc

    async def get_signed_url(self, bucket: str, key: str, ttl_seconds: int) -> str:
        try:
            async with self._client() as s3:
                return await s3.generate_presigned_url(
                    ClientMethod="get_object",
                    Params={"Bucket": self._bucket(bucket), "Key": key},
                    ExpiresIn=ttl_seconds,
                )
        except (ClientError, BotoCoreError) as exc:
            raise BackendError(f"Signing {key} failed: {exc}", operation="get_signed_url") from exc

    async def exists(self, bucket: str, key: str) -> bool:
        try:
            async with self._client() as s3:
                await s3.head_object(Bucket=self._bucket(bucket), Key=key)
        except ClientError as exc:
            if _error_code(exc) in _MISSING_CODES:
                return False
            raise BackendError(f"Lookup of {key} failed: {exc}", operation="exists") from exc
        except BotoCoreError as exc:
            raise BackendError(f"Lookup of {key} failed: {exc}", operation="exists") from exc
        return True

    async def delete_object(self, bucket: str, key: str) -> None:
        try:
            async with self._client() as s3:
                await s3.delete_object(Bucket=self._bucket(bucket), Key=key)
        except (ClientError, BotoCoreError) as exc:
            raise BackendError(f"Delete of {key} failed: {exc}", operation="delete_object") from exc
        logger.debug("Deleted s3 object %s/%s", self._bucket(bucket), key)
