"""Preview, download, delete and extracted-text operations on one document.

Every operation first looks the document up among the session owner's
records, so one user can never reach another user's objects by id.
"""

from __future__ import annotations

import datetime as dt
import logging

from docscan.app.settings import AppSettings, get_app_settings
from docscan.backend.base import BackendClient, BackendError, Session
from docscan.exceptions import (
    DocumentNotFound,
    NoExtractedText,
    RecordDeleteFailed,
    StorageReadFailed,
    StorageWriteFailed,
    Unauthenticated,
)

from .models import (
    Download,
    DocumentRecord,
    ExtractedText,
    Preview,
    PreviewKind,
    extension_of,
    guess_media_type,
)

logger = logging.getLogger(__name__)

UNSUPPORTED_PREVIEW = "Preview not supported. Please download the file."


def preview_kind(file_path: str, image_extensions: list[str] | None = None) -> PreviewKind:
    ext = extension_of(file_path)
    if not ext:
        return PreviewKind.OTHER
    images = get_app_settings().image_extensions if image_extensions is None else image_extensions
    if ext in images:
        return PreviewKind.IMAGE
    if ext == "pdf":
        return PreviewKind.PDF
    return PreviewKind.OTHER


async def get_document(
    backend: BackendClient,
    session: Session | None,
    document_id: str,
    *,
    settings: AppSettings | None = None,
) -> DocumentRecord:
    settings = settings or get_app_settings()
    if session is None:
        raise Unauthenticated("Please sign in to access your documents")
    try:
        rows = await backend.records.select_all(
            settings.table, {"id": document_id, "user_id": session.user_id}
        )
    except BackendError as exc:
        raise StorageReadFailed(str(exc)) from exc
    if not rows:
        raise DocumentNotFound(f"Document {document_id} not found")
    return DocumentRecord.from_row(rows[0])


async def preview_document(
    backend: BackendClient,
    session: Session | None,
    document_id: str,
    *,
    settings: AppSettings | None = None,
    now: dt.datetime | None = None,
) -> Preview:
    """Issue a short-lived signed URL and classify how the document renders.

    A preview is not refreshed in place: once ``expires_at`` passes, callers
    request a new preview.
    """
    settings = settings or get_app_settings()
    doc = await get_document(backend, session, document_id, settings=settings)
    issued = now or dt.datetime.now(dt.timezone.utc)
    try:
        url = await backend.storage.get_signed_url(
            settings.bucket, doc.file_path, settings.preview_ttl_seconds
        )
    except BackendError as exc:
        raise StorageReadFailed(str(exc) or "Failed to open document preview") from exc

    kind = preview_kind(doc.file_path, settings.image_extensions)
    return Preview(
        document=doc,
        url=url,
        kind=kind,
        expires_at=issued + dt.timedelta(seconds=settings.preview_ttl_seconds),
        message=UNSUPPORTED_PREVIEW if kind is PreviewKind.OTHER else None,
    )


async def download_document(
    backend: BackendClient,
    session: Session | None,
    document_id: str,
    *,
    settings: AppSettings | None = None,
) -> Download:
    settings = settings or get_app_settings()
    doc = await get_document(backend, session, document_id, settings=settings)
    try:
        content = await backend.storage.get_object(settings.bucket, doc.file_path)
    except BackendError as exc:
        raise StorageReadFailed(str(exc) or "Failed to download document") from exc
    return Download(
        filename=doc.document_name,
        content=content,
        media_type=guess_media_type(doc.document_name),
    )


async def delete_document(
    backend: BackendClient,
    session: Session | None,
    document_id: str,
    *,
    settings: AppSettings | None = None,
) -> DocumentRecord:
    """Remove the stored object, then the record.

    If the object cannot be removed the record is left alone, so a record
    never outlives a failed delete without its object.
    """
    settings = settings or get_app_settings()
    doc = await get_document(backend, session, document_id, settings=settings)
    ctx = {"user_id": doc.user_id, "document_id": doc.id, "file_path": doc.file_path}

    try:
        await backend.storage.delete_object(settings.bucket, doc.file_path)
    except BackendError as exc:
        logger.warning("Object removal failed; record kept: %s", exc, extra=ctx)
        raise StorageWriteFailed(str(exc) or "Failed to delete document.") from exc

    try:
        removed = await backend.records.delete_by_id(settings.table, doc.id)
    except BackendError as exc:
        logger.error("Record removal failed after object removal: %s", exc, extra=ctx)
        raise RecordDeleteFailed(str(exc) or "Failed to delete document.") from exc
    if not removed:
        raise RecordDeleteFailed(f'"{doc.document_name}" could not be removed.')

    logger.info("Deleted %s", doc.document_name, extra=ctx)
    return doc


async def extracted_text(
    backend: BackendClient,
    session: Session | None,
    document_id: str,
    *,
    settings: AppSettings | None = None,
) -> ExtractedText:
    doc = await get_document(backend, session, document_id, settings=settings)
    if not doc.extracted_text:
        raise NoExtractedText()
    return ExtractedText(
        document_id=doc.id,
        document_name=doc.document_name,
        extracted_text=doc.extracted_text,
    )
