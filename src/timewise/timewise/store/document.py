"""Document store contract shared by the memory and MySQL backends.

The store keeps schemaless documents grouped in named collections. Writes may
carry the ``SERVER_TIMESTAMP`` sentinel, which the store replaces with its own
write time; that time is reported back in ``WriteResult.update_time``.
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Optional, Protocol, Sequence

from ..common.datetime_utils import EPOCH, as_utc


@dataclass(frozen=True, order=True)
class StoreTimestamp:
    """Store-native instant: whole seconds since the epoch plus nanoseconds."""

    seconds: int
    nanoseconds: int = 0

    def __post_init__(self):
        if not 0 <= self.nanoseconds < 1_000_000_000:
            raise ValueError(f"nanoseconds out of range: {self.nanoseconds}")

    @classmethod
    def from_datetime(cls, value: datetime) -> "StoreTimestamp":
        delta = as_utc(value) - EPOCH
        seconds = delta.days * 86400 + delta.seconds
        return cls(seconds=seconds, nanoseconds=delta.microseconds * 1000)

    def to_datetime(self) -> datetime:
        # datetime keeps microseconds; sub-microsecond precision is truncated.
        return EPOCH + timedelta(seconds=self.seconds, microseconds=self.nanoseconds // 1000)


class _ServerTimestamp:
    _instance: Optional["_ServerTimestamp"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass(frozen=True)
class StoredDocument:
    doc_id: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WriteResult:
    doc_id: str
    update_time: StoreTimestamp


def resolve_server_timestamps(data: dict[str, Any], write_time: StoreTimestamp) -> dict[str, Any]:
    """Return a copy of ``data`` with every top-level ``SERVER_TIMESTAMP`` replaced."""
    return {k: (write_time if v is SERVER_TIMESTAMP else v) for k, v in data.items()}


class DocumentStore(Protocol):
    """Giao diện document store (async).

    Lưu ý (DIP): gateway phụ thuộc vào interface này, không phụ thuộc trực tiếp DB cụ thể.
    """

    async def add(self, collection: str, data: dict[str, Any]) -> WriteResult:
        raise NotImplementedError

    async def get(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        raise NotImplementedError

    async def query(
        self,
        collection: str,
        *,
        field: str,
        value: Any,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> Sequence[StoredDocument]:
        raise NotImplementedError

    async def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> WriteResult:
        """Merge ``data`` into an existing document; raises ``NotFoundError`` if it is absent."""

        raise NotImplementedError

    async def delete(self, collection: str, doc_id: str) -> bool:
        """Return False when there was nothing to delete."""

        raise NotImplementedError


_ID_ALPHABET = string.ascii_letters + string.digits


def new_document_id(length: int = 20) -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))
