"""Quota-enforced multi-file upload.

The batch is checked against the per-user quota once up front, so an
oversized batch is rejected before anything is written. Files are then
written one at a time: object first, record second. Each record insert is
itself guarded by the record store's atomic ``insert_within_quota``, which
keeps concurrent batches from the same user from overshooting the quota
between the up-front check and the writes.

Every file gets a key no other object holds, so a failed record write only
ever discards the object this call just stored.
"""

from __future__ import annotations

import datetime as dt
import logging
import posixpath
from typing import Callable, Sequence

from docscan.app.settings import AppSettings, get_app_settings
from docscan.backend.base import BackendClient, BackendError, QuotaGuardError, Session
from docscan.exceptions import (
    NoFilesSelected,
    QuotaExceeded,
    RecordWriteFailed,
    StorageReadFailed,
    StorageWriteFailed,
    Unauthenticated,
    UnsupportedFileType,
)

from .models import DocumentRecord, DocumentStatus, DocumentType, LocalFile, UploadResult

logger = logging.getLogger(__name__)

Clock = Callable[[], dt.datetime]


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def base_name(filename: str) -> str:
    """Final path component of a client-supplied filename."""
    return posixpath.basename(filename.replace("\\", "/")) or "unnamed"


_EPOCH = dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc)
_MILLISECOND = dt.timedelta(milliseconds=1)


def epoch_millis(at: dt.datetime) -> int:
    return (at - _EPOCH) // _MILLISECOND


def storage_key(user_id: str, filename: str, at: dt.datetime | int) -> str:
    """Storage key ``{user_id}/{epoch_ms}-{filename}`` for a file uploaded at ``at``."""
    millis = at if isinstance(at, int) else epoch_millis(at)
    return f"{user_id}/{millis}-{base_name(filename)}"


async def allocate_key(
    backend: BackendClient,
    bucket: str,
    user_id: str,
    filename: str,
    at: dt.datetime,
    taken: set[str],
) -> str:
    """First free key at or after ``at``.

    A key is free when no earlier file in this batch took it and the bucket
    holds no object under it. Collisions move the timestamp forward one
    millisecond at a time.
    """
    millis = epoch_millis(at)
    while True:
        key = storage_key(user_id, filename, millis)
        if key not in taken and not await backend.storage.exists(bucket, key):
            taken.add(key)
            return key
        millis += 1


def _check_types(files: Sequence[LocalFile], accepted: Sequence[str]) -> None:
    allowed = {ext.lower().lstrip(".") for ext in accepted}
    rejected = [f.name for f in files if f.extension not in allowed]
    if rejected:
        formats = ", ".join(sorted(ext.upper() for ext in allowed))
        raise UnsupportedFileType(
            f"{', '.join(rejected)}: unsupported file type. Supported formats: {formats}"
        )


async def upload_documents(
    backend: BackendClient,
    session: Session | None,
    files: Sequence[LocalFile],
    document_type: DocumentType | str,
    *,
    settings: AppSettings | None = None,
    clock: Clock | None = None,
) -> UploadResult:
    """Upload a batch of files as documents of one type.

    Raises:
        Unauthenticated: no session.
        NoFilesSelected: empty batch.
        UnsupportedFileType: a file extension is not accepted; nothing is written.
        QuotaExceeded: the batch would take the user over the quota; nothing is written.
        StorageWriteFailed / RecordWriteFailed: a write failed part-way. Files
            before the failing one stay uploaded; the rest are not attempted.
    """
    settings = settings or get_app_settings()
    clock = clock or _utcnow

    if session is None:
        raise Unauthenticated()
    if not files:
        raise NoFilesSelected()
    doc_type = DocumentType(document_type)
    _check_types(files, settings.accepted_extensions)

    user_id = session.user_id
    try:
        existing = await backend.records.count(settings.table, {"user_id": user_id})
    except BackendError as exc:
        raise StorageReadFailed(str(exc)) from exc

    if existing + len(files) > settings.quota:
        logger.info(
            "Upload rejected: %d existing + %d new exceeds quota %d",
            existing,
            len(files),
            settings.quota,
            extra={"user_id": user_id},
        )
        raise QuotaExceeded(settings.quota, existing)

    created: list[DocumentRecord] = []
    taken: set[str] = set()
    for file in files:
        at = clock()
        key = storage_key(user_id, file.name, at)
        try:
            key = await allocate_key(backend, settings.bucket, user_id, file.name, at, taken)
            await backend.storage.put_object(settings.bucket, key, file.content, file.media_type)
        except BackendError as exc:
            logger.warning(
                "Object write failed after %d of %d files: %s",
                len(created),
                len(files),
                exc,
                extra={"user_id": user_id, "file_path": key},
            )
            raise StorageWriteFailed(str(exc)) from exc

        row = {
            "user_id": user_id,
            "document_name": base_name(file.name),
            "document_type": doc_type.value,
            "file_path": key,
            "file_size": file.size,
            "status": DocumentStatus.SUCCESS.value,
        }
        try:
            stored = await backend.records.insert_within_quota(
                settings.table, row, owner_field="user_id", limit=settings.quota
            )
        except QuotaGuardError as exc:
            await _discard_object(backend, settings.bucket, key, user_id)
            raise QuotaExceeded(exc.limit, exc.current) from exc
        except BackendError as exc:
            await _discard_object(backend, settings.bucket, key, user_id)
            logger.warning(
                "Record write failed after %d of %d files: %s",
                len(created),
                len(files),
                exc,
                extra={"user_id": user_id, "file_path": key},
            )
            raise RecordWriteFailed(str(exc)) from exc

        record = DocumentRecord.from_row(stored)
        created.append(record)
        logger.info(
            "Uploaded %s (%d bytes)",
            record.document_name,
            record.file_size,
            extra={"user_id": user_id, "document_id": record.id, "file_path": key},
        )

    return UploadResult(
        count=len(created),
        message=f"{len(created)} file(s) scanned successfully!",
        documents=created,
    )


async def _discard_object(backend: BackendClient, bucket: str, key: str, user_id: str) -> None:
    # The record for this object was never written; drop the object so it is not orphaned.
    try:
        await backend.storage.delete_object(bucket, key)
    except BackendError:
        logger.exception("Could not remove orphaned object", extra={"user_id": user_id, "file_path": key})
