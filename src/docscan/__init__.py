from . import api, app

# Base exception
from .exceptions import DocScanError

# Backend
from .backend import BackendClient, Session, easy_backend

# Workflows
from .documents import (
    DocumentRecord,
    DocumentType,
    LocalFile,
    dashboard,
    delete_document,
    download_document,
    extracted_text,
    list_documents,
    preview_document,
    upload_documents,
)

__version__ = "0.1.0"

__all__ = [
    # Modules
    "app",
    "api",
    # Base exception
    "DocScanError",
    # Backend
    "BackendClient",
    "Session",
    "easy_backend",
    # Workflows
    "DocumentRecord",
    "DocumentType",
    "LocalFile",
    "dashboard",
    "delete_document",
    "download_document",
    "extracted_text",
    "list_documents",
    "preview_document",
    "upload_documents",
]
