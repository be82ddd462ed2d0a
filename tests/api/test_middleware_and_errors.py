"""Tests for the API middleware, error rendering and router discovery."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from docscan.api import create_app
from docscan.api.errors import register_error_handlers
from docscan.api.middleware import CatchAllExceptionMiddleware, RequestSizeLimitMiddleware
from docscan.api.routers import register_all_routers
from docscan.app.settings import AppSettings
from docscan.backend import BackendClient, MemoryRecordStore
from docscan.exceptions import StorageWriteFailed


class ExplodingRecords(MemoryRecordStore):
    async def select_all(self, table, filters=None, order_by=None, descending=False):
        raise RuntimeError("driver crashed")


@pytest.mark.asyncio
class TestCatchAllExceptionMiddleware:
    """Test CatchAllExceptionMiddleware functionality."""

    async def test_unexpected_error_is_problem_json(self, identity, storage, auth_headers):
        backend = BackendClient(identity=identity, storage=storage, records=ExplodingRecords())
        app = create_app(backend=backend, settings=AppSettings())

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.get("/documents", headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["code"] == "INTERNAL_ERROR"
        assert "driver crashed" not in response.text

    async def test_passes_through_normal_requests(self):
        app = FastAPI()

        @app.get("/ok")
        async def ok():
            return {"message": "success"}

        app.add_middleware(CatchAllExceptionMiddleware)

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.get("/ok")

        assert response.status_code == 200
        assert response.json() == {"message": "success"}


@pytest.mark.asyncio
class TestRequestSizeLimitMiddleware:
    """Test RequestSizeLimitMiddleware functionality."""

    async def test_rejects_large_upload(self, backend, auth_headers, storage):
        app = create_app(backend=backend, settings=AppSettings(max_request_bytes=1024))

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.post(
                "/documents",
                data={"document_type": "invoice"},
                files=[("files", ("big.pdf", b"x" * 4096, "application/pdf"))],
                headers=auth_headers,
            )

        assert response.status_code == 413
        assert response.json()["code"] == "PAYLOAD_TOO_LARGE"
        assert storage.keys("documents") == []

    async def test_allows_small_request(self):
        app = FastAPI()

        @app.post("/echo")
        async def echo():
            return {"ok": True}

        app.add_middleware(RequestSizeLimitMiddleware, max_bytes=1024)

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.post("/echo", content=b"small")

        assert response.status_code == 200


@pytest.mark.asyncio
class TestErrorHandler:
    """Tests for DocScanError rendering."""

    async def test_bad_gateway_problem(self):
        app = FastAPI()
        register_error_handlers(app)

        @app.delete("/thing")
        async def boom():
            raise StorageWriteFailed("bucket is read-only")

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.delete("/thing")

        assert response.status_code == 502
        assert response.json() == {
            "title": "Error",
            "status": 502,
            "detail": "bucket is read-only",
            "code": "STORAGE_WRITE_FAILED",
        }
        assert "www-authenticate" not in response.headers


class TestRegisterAllRouters:
    """Tests for router discovery."""

    def test_includes_every_router(self):
        app = FastAPI()

        register_all_routers(app, base_package="docscan.api.routers")

        paths = {route.path for route in app.routes}
        assert {"/health", "/auth/me", "/auth/sign-out", "/documents", "/documents/dashboard"} <= paths
        assert "/documents/{document_id}/preview" in paths

    def test_exclude_by_env(self):
        app = FastAPI()

        register_all_routers(
            app, base_package="docscan.api.routers", exclude={"prod": {"auth"}}, env="prod"
        )

        paths = {route.path for route in app.routes}
        assert "/auth/me" not in paths
        assert "/health" in paths

    def test_prefix(self):
        app = FastAPI()

        register_all_routers(app, base_package="docscan.api.routers", prefix="/v1")

        assert "/v1/documents" in {route.path for route in app.routes}

    def test_rejects_module(self):
        with pytest.raises(RuntimeError):
            register_all_routers(FastAPI(), base_package="docscan.api.deps")
