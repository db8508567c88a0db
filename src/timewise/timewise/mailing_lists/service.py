from __future__ import annotations

import logging

from ..common.results import OperationResult
from ..core.constants import MSG_LIST_ADDED
from ..core.enums import ResultCode
from ..core.exceptions import MailingListError
from .model import MailingList
from .registry import MailingListRegistry

logger = logging.getLogger(__name__)


class MailingListService:
    def __init__(self, registry: MailingListRegistry):
        self._registry = registry

    async def list_mailing_lists(self) -> list[MailingList]:
        return self._registry.list()

    async def add_mailing_list(self, name: str, emails_csv: str) -> OperationResult:
        try:
            self._registry.add_list(name, emails_csv)
        except MailingListError as e:
            logger.info("Mailing list %r rejected: %s", name, e)
            return OperationResult.fail(str(e), ResultCode.INVALID)
        return OperationResult.ok(MSG_LIST_ADDED)
