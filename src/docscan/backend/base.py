"""Backend client capability surface.

docscan delegates identity, blob storage and metadata rows to a hosted
backend. The workflows only see the three abstract capability groups below,
bundled together in :class:`BackendClient`. Concrete implementations live in
``docscan.backend.identity``, ``docscan.backend.storage`` and
``docscan.backend.records``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence


class BackendError(Exception):
    """Raised by backend implementations when a call to the service fails."""

    def __init__(self, message: str, *, operation: str | None = None):
        self.operation = operation
        super().__init__(message)


class ObjectNotFoundError(BackendError):
    """The requested object key does not exist in the bucket."""


class QuotaGuardError(BackendError):
    """A guarded insert was refused because the owner is at the limit."""

    def __init__(self, message: str, *, current: int, limit: int):
        self.current = current
        self.limit = limit
        super().__init__(message, operation="insert_within_quota")


@dataclass(frozen=True)
class Session:
    """The signed-in user a request acts on behalf of."""

    user_id: str
    email: str | None = None
    token: str | None = None
    claims: Mapping[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        """First and last name from the ``user_metadata`` claim, or "User"."""
        meta = self.claims.get("user_metadata") or {}
        full = f"{meta.get('first_name') or ''} {meta.get('last_name') or ''}".strip()
        return full or "User"


Row = dict[str, Any]


class IdentityProvider(ABC):
    @abstractmethod
    async def get_current_user(self, token: str | None) -> Session | None:
        """Resolve a bearer token to a session, or None when it is missing or invalid."""

    @abstractmethod
    async def sign_out(self, token: str) -> None:
        """Invalidate the token so later lookups return None."""


class ObjectStorage(ABC):
    @abstractmethod
    async def put_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        """Store ``data`` under ``key`` and return the key."""

    @abstractmethod
    async def get_object(self, bucket: str, key: str) -> bytes:
        ...

    @abstractmethod
    async def get_signed_url(self, bucket: str, key: str, ttl_seconds: int) -> str:
        ...

    @abstractmethod
    async def exists(self, bucket: str, key: str) -> bool:
        ...

    @abstractmethod
    async def delete_object(self, bucket: str, key: str) -> None:
        ...

    async def close(self) -> None:
        return None


class RecordStore(ABC):
    @abstractmethod
    async def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        """Insert a row; the store assigns ``id`` and ``created_at``."""

    @abstractmethod
    async def select_all(
        self,
        table: str,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> Sequence[Row]:
        ...

    @abstractmethod
    async def delete_by_id(self, table: str, id: str) -> int:
        """Delete a row by id and return the number of rows removed."""

    @abstractmethod
    async def count(self, table: str, filters: Mapping[str, Any] | None = None) -> int:
        ...

    @abstractmethod
    async def insert_within_quota(
        self,
        table: str,
        row: Mapping[str, Any],
        *,
        owner_field: str,
        limit: int,
    ) -> Row:
        """Insert ``row`` only if its owner has fewer than ``limit`` rows.

        The count and the insert happen as one atomic step. Raises
        :class:`QuotaGuardError` when the owner is already at the limit.
        """

    async def close(self) -> None:
        return None


@dataclass
class BackendClient:
    identity: IdentityProvider
    storage: ObjectStorage
    records: RecordStore

    async def close(self) -> None:
        await self.storage.close()
        await self.records.close()


__all__ = [
    "BackendClient",
    "BackendError",
    "IdentityProvider",
    "ObjectNotFoundError",
    "ObjectStorage",
    "QuotaGuardError",
    "RecordStore",
    "Row",
    "Session",
]
