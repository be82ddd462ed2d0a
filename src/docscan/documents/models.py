"""Document models.

``DocumentRecord`` mirrors one row of the ``documents`` table. The other
models are the inputs and outputs of the upload, listing and lifecycle
workflows.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, Field


class DocumentType(str, Enum):
    """Document types offered by the scanner."""

    RESUME = "resume"
    INVOICE = "invoice"
    CHALLAN = "challan"

    @property
    def label(self) -> str:
        return _TYPE_LABELS[self]


_TYPE_LABELS = {
    DocumentType.RESUME: "Resume",
    DocumentType.INVOICE: "Invoice",
    DocumentType.CHALLAN: "Delivery Challan",
}


class DocumentStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class PreviewKind(str, Enum):
    IMAGE = "image"
    PDF = "pdf"
    OTHER = "other"


class DocumentRecord(BaseModel):
    """One uploaded document."""

    id: str = Field(..., description="Document ID")
    user_id: str = Field(..., description="Document owner")
    document_name: str = Field(..., description="Original filename")
    # kept as a plain string: rows written by other clients may carry unknown types
    document_type: str = Field(..., description="resume, invoice or challan")
    file_path: str = Field(..., description="Storage key")
    file_size: int = Field(0, description="File size in bytes")
    status: DocumentStatus = Field(DocumentStatus.SUCCESS, description="Write-time outcome")
    created_at: datetime = Field(..., description="Upload timestamp")
    extracted_text: str | None = Field(None, description="Text extracted downstream, if any")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "DocumentRecord":
        return cls.model_validate(
            {**row, "id": str(row["id"]), "user_id": str(row["user_id"])}
        )


@dataclass(frozen=True)
class LocalFile:
    """A file selected for upload."""

    name: str
    content: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        return extension_of(self.name)

    @property
    def media_type(self) -> str:
        return self.content_type or guess_media_type(self.name)


def extension_of(path: str) -> str:
    """Lower-cased text after the last dot, or "" when there is none."""
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].lower()


def guess_media_type(name: str) -> str:
    return mimetypes.guess_type(name)[0] or "application/octet-stream"


class UploadResult(BaseModel):
    count: int
    message: str
    documents: list[DocumentRecord]


class TypeSummary(BaseModel):
    document_type: DocumentType
    label: str
    count: int = 0
    last_used: datetime | None = None
    last_used_label: str = "Never used"


class Dashboard(BaseModel):
    used: int
    remaining: int
    total: int
    summaries: list[TypeSummary]


class Preview(BaseModel):
    document: DocumentRecord
    url: str
    kind: PreviewKind
    expires_at: datetime
    message: str | None = None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class ExtractedText(BaseModel):
    document_id: str
    document_name: str
    extracted_text: str


@dataclass(frozen=True)
class Download:
    filename: str
    content: bytes
    media_type: str
