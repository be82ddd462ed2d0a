from __future__ import annotations

from typing import Optional

from sqlalchemy import BigInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, CreatedAtMixin, UUIDMixin


class DocumentRow(UUIDMixin, CreatedAtMixin, Base):
    __tablename__ = "documents"

    user_id: Mapped[str] = mapped_column(String(128), index=True, nullable=False)
    document_name: Mapped[str] = mapped_column(String(512), nullable=False)
    document_type: Mapped[str] = mapped_column(String(32), nullable=False)
    file_path: Mapped[str] = mapped_column(String(1024), unique=True, nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="success")
    extracted_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


# table name -> mapped class, consumed by the SQL record store
TABLES: dict[str, type[Base]] = {
    DocumentRow.__tablename__: DocumentRow,
}
