from __future__ import annotations

import datetime as dt
from typing import Iterable, Sequence

from docscan.app.settings import AppSettings, get_app_settings
from docscan.backend.base import BackendClient, BackendError, Session
from docscan.exceptions import StorageReadFailed, Unauthenticated

from .models import Dashboard, DocumentRecord, DocumentType, TypeSummary

_DAY = dt.timedelta(hours=24)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


async def _fetch(
    backend: BackendClient,
    session: Session | None,
    settings: AppSettings,
    *,
    newest_first: bool,
) -> list[DocumentRecord]:
    if session is None:
        raise Unauthenticated("Please sign in to view your documents")
    try:
        rows = await backend.records.select_all(
            settings.table,
            {"user_id": session.user_id},
            order_by="created_at" if newest_first else None,
            descending=newest_first,
        )
    except BackendError as exc:
        raise StorageReadFailed(str(exc) or "Failed to load documents") from exc
    return [DocumentRecord.from_row(r) for r in rows]


async def list_documents(
    backend: BackendClient,
    session: Session | None,
    *,
    settings: AppSettings | None = None,
) -> list[DocumentRecord]:
    """All of the session owner's documents, newest first."""
    return await _fetch(backend, session, settings or get_app_settings(), newest_first=True)


def search(documents: Iterable[DocumentRecord], query: str | None) -> list[DocumentRecord]:
    """Case-insensitive substring match on ``document_name`` only."""
    docs = list(documents)
    if not query:
        return docs
    needle = query.lower()
    return [d for d in docs if needle in d.document_name.lower()]


def summarize(
    documents: Iterable[DocumentRecord],
    *,
    now: dt.datetime | None = None,
) -> list[TypeSummary]:
    """Per-type count and most recent upload, in resume/invoice/challan order.

    Rows whose type is not one of the known types are ignored.
    """
    now = now or _utcnow()
    counts = {t: 0 for t in DocumentType}
    latest: dict[DocumentType, dt.datetime | None] = {t: None for t in DocumentType}

    for doc in documents:
        try:
            doc_type = DocumentType(doc.document_type.lower())
        except ValueError:
            continue
        counts[doc_type] += 1
        seen = latest[doc_type]
        if seen is None or doc.created_at > seen:
            latest[doc_type] = doc.created_at

    return [
        TypeSummary(
            document_type=t,
            label=t.label,
            count=counts[t],
            last_used=latest[t],
            last_used_label=format_last_used(latest[t], now=now),
        )
        for t in DocumentType
    ]


async def dashboard(
    backend: BackendClient,
    session: Session | None,
    *,
    settings: AppSettings | None = None,
    now: dt.datetime | None = None,
) -> Dashboard:
    """Quota usage plus the per-type summaries shown on the dashboard."""
    settings = settings or get_app_settings()
    docs = await _fetch(backend, session, settings, newest_first=False)
    summaries = summarize(docs, now=now)
    used = sum(s.count for s in summaries)
    return Dashboard(
        used=used,
        remaining=max(settings.quota - used, 0),
        total=settings.quota,
        summaries=summaries,
    )


def format_last_used(when: dt.datetime | None, *, now: dt.datetime | None = None) -> str:
    if when is None:
        return "Never used"
    now = now or _utcnow()
    if now - when < _DAY:
        return "Last used today"
    return f"Last used on {when.month}/{when.day}/{when.year}"


def format_timestamp(when: dt.datetime) -> str:
    """History-table timestamp, e.g. ``Oct 18, 2026, 09:05 AM``."""
    return f"{when:%b} {when.day}, {when.year}, {when:%I:%M %p}"


def count_label(documents: Sequence[DocumentRecord]) -> str:
    n = len(documents)
    return f"Showing {n} document{'' if n == 1 else 's'}."
