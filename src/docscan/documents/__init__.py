"""Document workflows: quota-enforced upload, listing and per-document lifecycle.

Each workflow takes the backend client and the caller's session explicitly:

    >>> backend = easy_backend()
    >>> session = await backend.identity.get_current_user(token)
    >>> result = await upload_documents(backend, session, files, DocumentType.INVOICE)
    >>> board = await dashboard(backend, session)
"""

from .lifecycle import (
    delete_document,
    download_document,
    extracted_text,
    get_document,
    preview_document,
    preview_kind,
)
from .listing import dashboard, format_last_used, format_timestamp, list_documents, search, summarize
from .models import (
    Dashboard,
    DocumentRecord,
    DocumentStatus,
    DocumentType,
    Download,
    ExtractedText,
    LocalFile,
    Preview,
    PreviewKind,
    TypeSummary,
    UploadResult,
)
from .upload import storage_key, upload_documents

__all__ = [
    "Dashboard",
    "DocumentRecord",
    "DocumentStatus",
    "DocumentType",
    "Download",
    "ExtractedText",
    "LocalFile",
    "Preview",
    "PreviewKind",
    "TypeSummary",
    "UploadResult",
    "dashboard",
    "delete_document",
    "download_document",
    "extracted_text",
    "format_last_used",
    "format_timestamp",
    "get_document",
    "list_documents",
    "preview_document",
    "preview_kind",
    "search",
    "storage_key",
    "summarize",
    "upload_documents",
]
