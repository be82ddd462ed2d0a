"""Error taxonomy for docscan.

Every workflow failure is a ``DocScanError``. Each subclass carries a short
title and a human-readable message meant to be shown to the user as-is, plus
the HTTP status and machine code the API renders it with.
"""

from __future__ import annotations


class DocScanError(Exception):
    """Base class for all user-facing docscan errors."""

    title: str = "Error"
    status_code: int = 500
    code: str = "DOCSCAN_ERROR"
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(DocScanError):
    title = "Authentication required"
    status_code = 401
    code = "UNAUTHENTICATED"
    default_message = "Please sign in to upload documents"


class NoFilesSelected(DocScanError):
    title = "No files selected"
    status_code = 400
    code = "NO_FILES_SELECTED"
    default_message = "Please select at least one file to scan"


class UnsupportedFileType(DocScanError):
    title = "Unsupported file type"
    status_code = 415
    code = "UNSUPPORTED_FILE_TYPE"
    default_message = "Supported formats: PDF, DOC, DOCX, TXT, JPG, PNG"


class QuotaExceeded(DocScanError):
    title = "Upload limit reached"
    status_code = 409
    code = "QUOTA_EXCEEDED"

    def __init__(self, limit: int, current: int, message: str | None = None):
        self.limit = limit
        self.current = current
        super().__init__(
            message
            or f"You can only upload {limit} documents total. You currently have {current}."
        )


class DocumentNotFound(DocScanError):
    title = "Not found"
    status_code = 404
    code = "DOCUMENT_NOT_FOUND"
    default_message = "Document not found"


class StorageWriteFailed(DocScanError):
    status_code = 502
    code = "STORAGE_WRITE_FAILED"
    default_message = "Failed to scan documents"


class RecordWriteFailed(DocScanError):
    status_code = 502
    code = "RECORD_WRITE_FAILED"
    default_message = "Failed to scan documents"


class StorageReadFailed(DocScanError):
    status_code = 502
    code = "STORAGE_READ_FAILED"
    default_message = "Failed to download document"


class RecordDeleteFailed(DocScanError):
    status_code = 502
    code = "RECORD_DELETE_FAILED"
    default_message = "Failed to delete document."


class NoExtractedText(DocScanError):
    title = "No extracted text"
    status_code = 404
    code = "NO_EXTRACTED_TEXT"
    default_message = "This document does not have extracted text available."


__all__ = [
    "DocScanError",
    "Unauthenticated",
    "NoFilesSelected",
    "UnsupportedFileType",
    "QuotaExceeded",
    "DocumentNotFound",
    "StorageWriteFailed",
    "RecordWriteFailed",
    "StorageReadFailed",
    "RecordDeleteFailed",
    "NoExtractedText",
]
