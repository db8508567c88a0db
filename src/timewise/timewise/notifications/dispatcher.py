from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional, Sequence

from ..core.constants import DEFAULT_NOTIFY_WORKERS
from .model import EventSummary
from .sender import NotificationSender

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Fire-and-forget notification delivery on a small thread pool.

    ``dispatch`` returns immediately; sender failures are logged and never
    reach the caller.
    """

    def __init__(self, sender: NotificationSender, *, max_workers: int = DEFAULT_NOTIFY_WORKERS):
        self._sender = sender
        self._executor = ThreadPoolExecutor(max_workers=max(1, int(max_workers)), thread_name_prefix="notify")

    def dispatch(self, summary: EventSummary, addresses: Sequence[str]) -> Optional[Future]:
        if not addresses:
            logger.info("Event %s has no resolvable recipients; notification skipped", summary.event_id)
            return None
        future = self._executor.submit(self._sender.send, summary, list(addresses))
        future.add_done_callback(lambda f: self._log_failure(f, summary))
        return future

    @staticmethod
    def _log_failure(future: Future, summary: EventSummary) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Notification for event %s failed", summary.event_id, exc_info=exc)

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
