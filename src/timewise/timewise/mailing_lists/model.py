from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class MailingList:
    """Named group of email addresses an event can be announced to."""

    list_id: str
    name: str
    emails: tuple[str, ...]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MailingList":
        return cls(list_id=str(data["id"]), name=str(data["name"]), emails=tuple(data.get("emails") or ()))

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.list_id, "name": self.name, "emails": list(self.emails)}
