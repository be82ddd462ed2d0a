"""Tests for S3Storage against a mocked aioboto3 session."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import ClientError

from docscan.backend import BackendError, ObjectNotFoundError
from docscan.backend.storage.s3 import S3Storage


def _async_cm(value):
    cm = MagicMock()
    cm.__aenter__ = AsyncMock(return_value=value)
    cm.__aexit__ = AsyncMock(return_value=False)
    return cm


def _client_error(code: str, op: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, op)


@pytest.fixture
def s3_client():
    client = MagicMock()
    client.put_object = AsyncMock(return_value={})
    client.delete_object = AsyncMock(return_value={})
    client.generate_presigned_url = AsyncMock(return_value="https://s3.example.com/signed")
    return client


@pytest.fixture
def s3_session(s3_client):
    session = MagicMock()
    session.client.return_value = _async_cm(s3_client)
    return session


@pytest.fixture
def s3(s3_session):
    return S3Storage(
        region="us-east-1",
        endpoint_url="http://minio:9000",
        access_key="AKIA",
        secret_key="secret",
        bucket_map={"documents": "prod-documents"},
        session=s3_session,
    )


@pytest.mark.asyncio
@pytest.mark.backend
class TestS3Storage:
    """Tests for S3Storage."""

    async def test_client_kwargs(self, s3, s3_session):
        await s3.put_object("documents", "k", b"x")

        s3_session.client.assert_called_with(
            "s3",
            region_name="us-east-1",
            endpoint_url="http://minio:9000",
            aws_access_key_id="AKIA",
            aws_secret_access_key="secret",
        )

    async def test_put_uses_mapped_bucket(self, s3, s3_client):
        key = await s3.put_object("documents", "u1/1-a.pdf", b"data", "application/pdf")

        assert key == "u1/1-a.pdf"
        s3_client.put_object.assert_awaited_once_with(
            Bucket="prod-documents", Key="u1/1-a.pdf", Body=b"data", ContentType="application/pdf"
        )

    async def test_unmapped_bucket_passes_through(self, s3, s3_client):
        await s3.put_object("avatars", "k", b"x")

        assert s3_client.put_object.await_args.kwargs["Bucket"] == "avatars"

    async def test_put_failure(self, s3, s3_client):
        s3_client.put_object.side_effect = _client_error("AccessDenied", "PutObject")

        with pytest.raises(BackendError) as exc_info:
            await s3.put_object("documents", "k", b"x")

        assert exc_info.value.operation == "put_object"

    async def test_get_reads_body(self, s3, s3_client):
        stream = MagicMock()
        stream.read = AsyncMock(return_value=b"content")
        s3_client.get_object = AsyncMock(return_value={"Body": _async_cm(stream)})

        assert await s3.get_object("documents", "k") == b"content"
        s3_client.get_object.assert_awaited_once_with(Bucket="prod-documents", Key="k")

    async def test_get_missing(self, s3, s3_client):
        s3_client.get_object = AsyncMock(side_effect=_client_error("NoSuchKey", "GetObject"))

        with pytest.raises(ObjectNotFoundError):
            await s3.get_object("documents", "k")

    async def test_get_other_error(self, s3, s3_client):
        s3_client.get_object = AsyncMock(side_effect=_client_error("InternalError", "GetObject"))

        with pytest.raises(BackendError) as exc_info:
            await s3.get_object("documents", "k")

        assert not isinstance(exc_info.value, ObjectNotFoundError)

    async def test_signed_url(self, s3, s3_client):
        url = await s3.get_signed_url("documents", "u1/1-a.pdf", 300)

        assert url == "https://s3.example.com/signed"
        s3_client.generate_presigned_url.assert_awaited_once_with(
            ClientMethod="get_object",
            Params={"Bucket": "prod-documents", "Key": "u1/1-a.pdf"},
            ExpiresIn=300,
        )

    async def test_delete(self, s3, s3_client):
        await s3.delete_object("documents", "k")

        s3_client.delete_object.assert_awaited_once_with(Bucket="prod-documents", Key="k")

    async def test_delete_failure(self, s3, s3_client):
        s3_client.delete_object.side_effect = _client_error("AccessDenied", "DeleteObject")

        with pytest.raises(BackendError):
            await s3.delete_object("documents", "k")

    async def test_exists_heads_mapped_bucket(self, s3, s3_client):
        s3_client.head_object = AsyncMock(return_value={"ContentLength": 1})

        assert await s3.exists("documents", "k") is True
        s3_client.head_object.assert_awaited_once_with(Bucket="prod-documents", Key="k")

    async def test_exists_missing(self, s3, s3_client):
        s3_client.head_object = AsyncMock(side_effect=_client_error("404", "HeadObject"))

        assert await s3.exists("documents", "k") is False

    async def test_exists_other_error(self, s3, s3_client):
        s3_client.head_object = AsyncMock(side_effect=_client_error("AccessDenied", "HeadObject"))

        with pytest.raises(BackendError) as exc_info:
            await s3.exists("documents", "k")

        assert exc_info.value.operation == "exists"
