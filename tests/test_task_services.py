"""Tests for the task service layer."""

import pytest
from django.core.exceptions import ValidationError

from apps.notifications.exceptions import TaskNotFound
from apps.notifications.scheduler import escalate_task, send_manual_reminder
from apps.tasks.models import Task
from apps.tasks.services import create_task, delete_task, get_task, infer_priority, update_task

from .conftest import NOW


@pytest.mark.parametrize('description, expected', [
    ('Server is down, fix ASAP', Task.Priority.URGENT),
    ('Critical and important', Task.Priority.URGENT),
    ('This is an important deliverable', Task.Priority.HIGH),
    ('Tidy up the wiki', Task.Priority.MEDIUM),
    ('', Task.Priority.MEDIUM),
    (None, Task.Priority.MEDIUM),
])
def test_infer_priority(description, expected):
    assert infer_priority(description) == expected


@pytest.mark.django_db
class TestCreateTask:

    def test_create(self):
        task = create_task(
            title='  Launch plan  ',
            assignee_name='Sam Lee',
            assignee_email='sam@example.com',
            due_date=NOW,
            description='Essential for the launch',
        )

        assert task.pk is not None
        assert task.title == 'Launch plan'
        assert task.priority == Task.Priority.HIGH
        assert task.status == Task.Status.PENDING
        assert task.reminder_count == 0
        assert task.escalated is False

    def test_explicit_priority(self):
        task = create_task('Launch plan', 'Sam Lee', 'sam@example.com', NOW,
                           description='urgent', priority=Task.Priority.LOW)

        assert task.priority == Task.Priority.LOW

    @pytest.mark.parametrize('field, value', [
        ('title', ''),
        ('assignee_name', '   '),
        ('assignee_email', 'not-an-email'),
        ('due_date', None),
        ('priority', 'extreme'),
    ])
    def test_invalid_input(self, field, value):
        kwargs = {
            'title': 'Launch plan',
            'assignee_name': 'Sam Lee',
            'assignee_email': 'sam@example.com',
            'due_date': NOW,
            field: value,
        }

        with pytest.raises(ValidationError):
            create_task(**kwargs)
        assert not Task.objects.exists()


@pytest.mark.django_db
class TestUpdateTask:

    def test_complete_and_reopen(self, make_task):
        task = make_task()

        update_task(task, status=Task.Status.COMPLETED)
        assert task.completed_at is not None

        update_task(task, status=Task.Status.IN_PROGRESS)
        task.refresh_from_db()
        assert task.status == Task.Status.IN_PROGRESS
        assert task.completed_at is None

    def test_same_status_is_a_no_op(self, make_task):
        task = make_task()

        update_task(task, status=Task.Status.PENDING)

        assert task.status == Task.Status.PENDING

    def test_invalid_transition(self, make_task):
        task = make_task(status=Task.Status.COMPLETED)

        with pytest.raises(ValidationError):
            update_task(task, status=Task.Status.PENDING)

    def test_engine_fields_are_ignored(self, make_task):
        task = make_task()

        update_task(task, title='Renamed', reminder_count=7, escalated=True)
        task.refresh_from_db()

        assert task.title == 'Renamed'
        assert task.reminder_count == 0
        assert task.escalated is False


@pytest.mark.django_db
def test_get_and_delete(make_task):
    task = make_task()
    assert get_task(task.pk) == task

    delete_task(task)

    with pytest.raises(TaskNotFound):
        get_task(task.pk)


@pytest.mark.django_db
class TestEditsRacingTheEngine:
    """A task edit saved after the engine touched the task keeps the engine's values."""

    def test_edit_keeps_escalation(self, make_task, delivery, now):
        task = make_task(days=-4)
        api_copy = Task.objects.get(pk=task.pk)
        cycle_copy = Task.objects.get(pk=task.pk)

        escalate_task(cycle_copy, 'overdue by 4 days', now, delivery)
        update_task(api_copy, title='Renamed')

        task.refresh_from_db()
        assert task.title == 'Renamed'
        assert task.escalated is True
        assert task.escalated_at == now

    def test_edit_keeps_reminder_count(self, make_task, delivery, now):
        task = make_task()
        api_copy = Task.objects.get(pk=task.pk)

        send_manual_reminder(task.pk, now=now, delivery=delivery)
        update_task(api_copy, priority=Task.Priority.HIGH)

        task.refresh_from_db()
        assert task.priority == Task.Priority.HIGH
        assert task.reminder_count == 1
        assert task.last_reminder_sent == now

    def test_full_save_of_stale_copy_cannot_clear_escalation(self, make_task, delivery, now):
        task = make_task(days=-4)
        stale = Task.objects.get(pk=task.pk)

        escalate_task(task, 'overdue by 4 days', now, delivery)

        stale.title = 'Renamed'
        with pytest.raises(ValidationError):
            stale.save()
        assert Task.objects.get(pk=task.pk).escalated is True
