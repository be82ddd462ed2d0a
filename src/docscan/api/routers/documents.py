"""Document endpoints: upload, history, dashboard, preview, download, delete.

Errors raised by the workflows are ``DocScanError`` subclasses and are
rendered by the handler in ``docscan.api.errors``.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, File, Form, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel

from docscan.api.deps import BackendDep, SessionDep, SettingsDep
from docscan.documents import lifecycle, listing
from docscan.documents.models import (
    Dashboard,
    DocumentRecord,
    DocumentType,
    ExtractedText,
    LocalFile,
    Preview,
    UploadResult,
)
from docscan.documents.upload import upload_documents

ROUTER_PREFIX = "/documents"
ROUTER_TAG = "documents"

router = APIRouter()


def content_disposition(filename: str) -> str:
    """``attachment`` header value that survives any filename.

    Header values are latin-1 on the wire, so the plain ``filename`` carries an
    ASCII stand-in and ``filename*`` (RFC 5987) carries the real UTF-8 name.
    """
    fallback = "".join(
        c if " " <= c <= "~" and c not in '"\\' else "_" for c in filename
    )
    value = f'attachment; filename="{fallback}"'
    encoded = quote(filename)
    if encoded != filename:
        value += f"; filename*=UTF-8''{encoded}"
    return value


class DocumentList(BaseModel):
    documents: list[DocumentRecord]
    count: int
    label: str


@router.post("", response_model=UploadResult, status_code=201)
async def upload_endpoint(
    backend: BackendDep,
    settings: SettingsDep,
    session: SessionDep,
    document_type: DocumentType = Form(...),
    files: Optional[list[UploadFile]] = File(None),
) -> UploadResult:
    """Upload one or more files as documents of ``document_type``.

    Example:
        ```bash
        curl -X POST http://localhost:8000/documents \\
          -H "Authorization: Bearer $TOKEN" \\
          -F "document_type=invoice" \\
          -F "files=@invoice-1.pdf" -F "files=@invoice-2.pdf"
        ```
    """
    selected = [
        LocalFile(name=f.filename or "unnamed", content=await f.read(), content_type=f.content_type)
        for f in files or []
    ]
    return await upload_documents(backend, session, selected, document_type, settings=settings)


@router.get("", response_model=DocumentList)
async def list_endpoint(
    backend: BackendDep,
    settings: SettingsDep,
    session: SessionDep,
    search: Optional[str] = None,
) -> DocumentList:
    """Upload history, newest first, optionally filtered by name."""
    docs = listing.search(
        await listing.list_documents(backend, session, settings=settings), search
    )
    return DocumentList(documents=docs, count=len(docs), label=listing.count_label(docs))


@router.get("/dashboard", response_model=Dashboard)
async def dashboard_endpoint(backend: BackendDep, settings: SettingsDep, session: SessionDep) -> Dashboard:
    return await listing.dashboard(backend, session, settings=settings)


@router.get("/{document_id}/preview", response_model=Preview)
async def preview_endpoint(
    document_id: str, backend: BackendDep, settings: SettingsDep, session: SessionDep
) -> Preview:
    """Signed preview URL; request a new one after ``expires_at``."""
    return await lifecycle.preview_document(backend, session, document_id, settings=settings)


@router.get("/{document_id}/download")
async def download_endpoint(
    document_id: str, backend: BackendDep, settings: SettingsDep, session: SessionDep
) -> Response:
    download = await lifecycle.download_document(backend, session, document_id, settings=settings)
    return Response(
        content=download.content,
        media_type=download.media_type,
        headers={
            "Content-Disposition": content_disposition(download.filename),
            "Content-Length": str(len(download.content)),
        },
    )


@router.get("/{document_id}/text", response_model=ExtractedText)
async def text_endpoint(
    document_id: str, backend: BackendDep, settings: SettingsDep, session: SessionDep
) -> ExtractedText:
    return await lifecycle.extracted_text(backend, session, document_id, settings=settings)


@router.delete("/{document_id}", status_code=204)
async def delete_endpoint(
    document_id: str, backend: BackendDep, settings: SettingsDep, session: SessionDep
) -> Response:
    await lifecycle.delete_document(backend, session, document_id, settings=settings)
    return Response(status_code=204)
