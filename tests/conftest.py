"""Pytest configuration and fixtures for deadline-chaser tests."""

from datetime import datetime, timedelta, timezone as dt_timezone

import pytest
from django.core.cache import cache

from apps.notifications.services import DeliveryChannel, DeliveryResult
from apps.tasks.models import Task


# Monday, 09:00 UTC
NOW = datetime(2026, 10, 19, 9, 0, tzinfo=dt_timezone.utc)


class FakeDeliveryChannel(DeliveryChannel):
    """
    Delivery channel that records every call instead of sending anything.

    Set ``fail_with`` / ``escalation_fail_with`` to an error message to
    make the matching transport report a failure, or ``raise_for`` to a
    set of task ids whose email transport raises.
    """

    def __init__(self):
        self.emails = []
        self.chats = []
        self.escalations = []
        self.fail_with = None
        self.escalation_fail_with = None
        self.raise_for = set()

    def send_email(self, task, reminder):
        if task.pk in self.raise_for:
            raise RuntimeError(f'transport exploded for task {task.pk}')
        self.emails.append((task.pk, reminder.pk, reminder.kind, reminder.tone))
        if self.fail_with:
            return DeliveryResult.failed(self.fail_with)
        return DeliveryResult(success=True, tracking_id=f'email-{reminder.pk}')

    def send_chat(self, task, reminder):
        self.chats.append((task.pk, reminder.pk, reminder.kind))
        return DeliveryResult(success=True, tracking_id=f'chat-{reminder.pk}')

    def escalate(self, task, reason):
        self.escalations.append((task.pk, reason))
        if self.escalation_fail_with:
            return DeliveryResult.failed(self.escalation_fail_with)
        return DeliveryResult(success=True, tracking_id=f'escalation-{task.pk}')


@pytest.fixture(autouse=True)
def clear_cache():
    """The reminder cycle lock lives in the cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def delivery():
    return FakeDeliveryChannel()


@pytest.fixture
def make_task(db):
    """Factory for tasks due ``days`` (may be fractional or negative) from NOW."""
    def _make_task(days=3, priority=Task.Priority.MEDIUM, **kwargs):
        defaults = {
            'title': 'Quarterly report',
            'description': 'Compile the Q3 numbers',
            'assignee_name': 'Sam Lee',
            'assignee_email': 'sam@example.com',
            'due_date': NOW + timedelta(days=days),
            'priority': priority,
        }
        defaults.update(kwargs)
        return Task.objects.create(**defaults)
    return _make_task
