from __future__ import annotations

import logging
import secrets
import string
import time
from typing import Callable, Iterable, Optional

from ..common.validators import is_valid_email
from ..core.constants import MAILING_LIST_ID_PREFIX, MAILING_LIST_ID_SUFFIX_LENGTH
from ..core.exceptions import MailingListError
from .model import MailingList

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def generate_list_id(now_ms: Optional[int] = None) -> str:
    """``ml_<epoch-ms>_<5 base36 chars>``."""
    ms = int(time.time() * 1000) if now_ms is None else int(now_ms)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(MAILING_LIST_ID_SUFFIX_LENGTH))
    return f"{MAILING_LIST_ID_PREFIX}{ms}_{suffix}"


def parse_email_csv(emails_csv: str) -> list[str]:
    """Split a comma-separated address string, keeping only syntactically valid addresses."""
    out: list[str] = []
    for part in (emails_csv or "").split(","):
        addr = part.strip()
        if addr and is_valid_email(addr) and addr not in out:
            out.append(addr)
    return out


class MailingListRegistry:
    """In-memory mailing lists, owned by the application container.

    Lists are only added, never edited; ids come from ``id_factory`` so
    concurrent adds cannot collide.
    """

    def __init__(self, lists: Iterable[MailingList] = (), *, id_factory: Callable[[], str] = generate_list_id):
        self._lists: list[MailingList] = list(lists)
        self._id_factory = id_factory

    def list(self) -> list[MailingList]:
        return list(self._lists)

    def list_ids(self) -> frozenset[str]:
        return frozenset(ml.list_id for ml in self._lists)

    def get(self, list_id: str) -> Optional[MailingList]:
        for ml in self._lists:
            if ml.list_id == list_id:
                return ml
        return None

    def resolve(self, ids: Iterable[str]) -> list[str]:
        """Union of member addresses for ``ids``, first-seen order; unknown ids are skipped."""
        addresses: dict[str, None] = {}
        for list_id in ids:
            ml = self.get(list_id)
            if ml is None:
                logger.info("Unknown mailing list %r ignored", list_id)
                continue
            addresses.update(dict.fromkeys(ml.emails))
        return list(addresses)

    def add_list(self, name: str, emails_csv: str) -> MailingList:
        name = (name or "").strip()
        if not name:
            raise MailingListError("List name is required")

        emails = parse_email_csv(emails_csv)
        if not emails:
            raise MailingListError("Invalid email format in new list. All provided emails were invalid.")

        ml = MailingList(list_id=self._id_factory(), name=name, emails=tuple(emails))
        self._lists.append(ml)
        logger.info("Mailing list %s (%s) added with %d address(es)", ml.list_id, ml.name, len(ml.emails))
        return ml
