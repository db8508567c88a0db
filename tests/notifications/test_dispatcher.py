from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone

import pytest

from src.timewise.timewise.notifications.dispatcher import NotificationDispatcher
from src.timewise.timewise.notifications.model import EventSummary

UTC = timezone.utc


class RecordingSender:
    def __init__(self):
        self.calls = []
        self.done = threading.Event()

    def send(self, summary, addresses):
        self.calls.append((summary.event_id, list(addresses)))
        self.done.set()


class FailingSender:
    def send(self, summary, addresses):
        raise RuntimeError("smtp down")


@pytest.fixture
def summary() -> EventSummary:
    return EventSummary(
        event_id="e1",
        action="created",
        title="Trip",
        event_type_label="Vacation",
        start_date=datetime(2024, 7, 1, tzinfo=UTC),
        end_date=datetime(2024, 7, 5, tzinfo=UTC),
        is_full_day=True,
        owner_name="Alice",
    )


def test_dispatch_sends_in_background(summary):
    sender = RecordingSender()
    dispatcher = NotificationDispatcher(sender, max_workers=1)

    future = dispatcher.dispatch(summary, ["a@x.com"])

    assert future is not None
    assert sender.done.wait(timeout=5)
    dispatcher.shutdown()
    assert sender.calls == [("e1", ["a@x.com"])]


def test_dispatch_without_addresses_is_skipped(summary):
    sender = RecordingSender()
    dispatcher = NotificationDispatcher(sender)

    assert dispatcher.dispatch(summary, []) is None
    dispatcher.shutdown()
    assert sender.calls == []


def test_sender_failure_is_logged_not_raised(summary, caplog):
    dispatcher = NotificationDispatcher(FailingSender(), max_workers=1)

    with caplog.at_level(logging.ERROR):
        future = dispatcher.dispatch(summary, ["a@x.com"])
        dispatcher.shutdown(wait=True)

    assert isinstance(future.exception(), RuntimeError)
    assert "Notification for event e1 failed" in caplog.text


def test_summary_text(summary):
    assert summary.subject == "[Vacation] Trip"
    body = summary.render_body()
    assert body.splitlines()[0] == "Alice created an event: Trip"
    assert "From: 2024-07-01" in body
    assert "To: 2024-07-05" in body
