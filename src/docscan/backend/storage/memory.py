from __future__ import annotations

import hashlib
import hmac
import time
from urllib.parse import quote, urlencode

from ..base import ObjectNotFoundError, ObjectStorage


class MemoryStorage(ObjectStorage):
    """In-process object storage keyed by (bucket, key).

    Signed URLs use the ``memory://`` scheme and carry an HMAC over the key and
    the expiry, so tests can check validity windows with :meth:`verify`.
    """

    def __init__(self, signing_secret: str = "docscan-memory"):
        self._objects: dict[tuple[str, str], tuple[bytes, str]] = {}
        self._secret = signing_secret.encode()

    def _sign(self, bucket: str, key: str, expires: int) -> str:
        message = f"{bucket}/{key}:{expires}".encode()
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

    async def put_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        self._objects[(bucket, key)] = (bytes(data), content_type)
        return key

    async def get_object(self, bucket: str, key: str) -> bytes:
        try:
            return self._objects[(bucket, key)][0]
        except KeyError:
            raise ObjectNotFoundError(f"Object not found: {bucket}/{key}", operation="get_object")

    async def get_signed_url(self, bucket: str, key: str, ttl_seconds: int) -> str:
        if (bucket, key) not in self._objects:
            raise ObjectNotFoundError(f"Object not found: {bucket}/{key}", operation="get_signed_url")
        expires = int(time.time()) + ttl_seconds
        params = urlencode({"expires": expires, "signature": self._sign(bucket, key, expires)})
        return f"memory://{bucket}/{quote(key)}?{params}"

    async def delete_object(self, bucket: str, key: str) -> None:
        # Missing keys are not an error, matching S3 DeleteObject.
        self._objects.pop((bucket, key), None)

    def verify(self, bucket: str, key: str, expires: int, signature: str, *, now: float | None = None) -> bool:
        if (now if now is not None else time.time()) > expires:
            return False
        return hmac.compare_digest(signature, self._sign(bucket, key, expires))

    async def exists(self, bucket: str, key: str) -> bool:
        return (bucket, key) in self._objects

    def keys(self, bucket: str) -> list[str]:
        return sorted(k for b, k in self._objects if b == bucket)
