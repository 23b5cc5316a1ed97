"""Tests for the reminder evaluation engine and single-reminder operations."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from django.core.exceptions import ValidationError

from apps.notifications import scheduler
from apps.notifications.content import render_reminder
from apps.notifications.exceptions import CycleAlreadyRunning, ReminderNotFound, TaskNotFound
from apps.notifications.scheduler import (
    cycle_lock,
    deliver_reminder,
    process_delivery_callback,
    record_response,
    run_evaluation_cycle,
    send_manual_reminder,
)
from apps.reminders.models import Reminder
from apps.tasks.models import Task

pytestmark = pytest.mark.django_db


# ============================================================================
# End-to-end cycles
# ============================================================================


class TestEvaluationCycle:

    def test_high_priority_due_tomorrow(self, make_task, delivery, now):
        task = make_task(days=1, priority=Task.Priority.HIGH)

        result = run_evaluation_cycle(now=now, delivery=delivery)

        reminders = list(task.reminders.all())
        assert len(reminders) == 1
        reminder = reminders[0]
        assert reminder.kind == Reminder.Kind.AUTO_1DAY
        assert reminder.tone == Reminder.Tone.FORMAL
        assert reminder.status == Reminder.Status.SENT
        assert reminder.tracking_id == f'email-{reminder.pk}'
        assert reminder.ai_generated is True
        assert reminder.subject == 'Reminder: "Quarterly report" due tomorrow'

        task.refresh_from_db()
        assert task.reminder_count == 1
        assert task.last_reminder_sent == now
        assert task.escalated is False

        assert result.reminders_sent == 1
        assert result.escalations == 0
        assert delivery.escalations == []

    def test_urgent_task_five_days_overdue(self, make_task, delivery, now):
        task = make_task(days=-5, priority=Task.Priority.URGENT)

        result = run_evaluation_cycle(now=now, delivery=delivery)

        task.refresh_from_db()
        assert task.escalated is True
        assert task.escalated_at == now

        kinds = sorted(task.reminders.values_list('kind', flat=True))
        assert kinds == [Reminder.Kind.AUTO_OVERDUE, Reminder.Kind.ESCALATION]

        overdue = task.reminders.get(kind=Reminder.Kind.AUTO_OVERDUE)
        assert overdue.tone == Reminder.Tone.URGENT
        assert overdue.status == Reminder.Status.SENT
        assert overdue.subject.startswith('[URGENT] OVERDUE:')

        escalation = task.reminders.get(kind=Reminder.Kind.ESCALATION)
        assert escalation.status == Reminder.Status.SENT
        assert escalation.tone == Reminder.Tone.URGENT
        assert escalation.message == 'Task escalated: urgent task overdue'
        assert escalation.tracking_id == f'escalation-{task.pk}'

        assert delivery.escalations == [(task.pk, 'urgent task overdue')]
        assert result.reminders_sent == 1
        assert result.escalations == 1

    def test_only_open_tasks_are_evaluated(self, make_task, delivery, now):
        make_task(days=3, status=Task.Status.COMPLETED)
        in_progress = make_task(days=3, status=Task.Status.IN_PROGRESS)

        result = run_evaluation_cycle(now=now, delivery=delivery)

        assert [r.task_id for r in result.results] == [in_progress.pk]
        assert Reminder.objects.count() == 1

    def test_task_with_no_due_offset_is_left_alone(self, make_task, delivery, now):
        task = make_task(days=2, priority=Task.Priority.URGENT)

        result = run_evaluation_cycle(now=now, delivery=delivery)

        assert result.results[0].kind is None
        assert not task.reminders.exists()
        assert delivery.emails == []

    def test_result_summary(self, make_task, delivery, now):
        make_task(days=3)
        data = run_evaluation_cycle(now=now, delivery=delivery).to_dict()

        assert data['tasks_evaluated'] == 1
        assert data['reminders_sent'] == 1
        assert data['failures'] == 0
        assert data['results'][0]['kind'] == Reminder.Kind.AUTO_3DAYS


class TestDuplicateSuppression:

    def test_second_run_same_day_sends_nothing(self, make_task, delivery, now):
        task = make_task(days=1, priority=Task.Priority.HIGH)

        run_evaluation_cycle(now=now, delivery=delivery)
        second = run_evaluation_cycle(now=now + timedelta(hours=2), delivery=delivery)

        assert second.reminders_sent == 0
        assert second.results[0].skipped is True
        assert task.reminders.count() == 1
        assert len(delivery.emails) == 1

        task.refresh_from_db()
        assert task.reminder_count == 1

    def test_overdue_reminder_repeats_next_day(self, make_task, delivery, now):
        task = make_task(days=-2, priority=Task.Priority.URGENT, escalated=True)

        run_evaluation_cycle(now=now, delivery=delivery)
        run_evaluation_cycle(now=now + timedelta(days=1), delivery=delivery)

        assert task.reminders.filter(kind=Reminder.Kind.AUTO_OVERDUE).count() == 2

    def test_failed_reminder_also_counts_for_the_day(self, make_task, delivery, now):
        task = make_task(days=3)
        delivery.fail_with = 'mailbox full'

        run_evaluation_cycle(now=now, delivery=delivery)
        delivery.fail_with = None
        second = run_evaluation_cycle(now=now, delivery=delivery)

        assert second.results[0].skipped is True
        assert task.reminders.count() == 1

    def test_constraint_hit_is_reported_as_skip(self, make_task, delivery, now):
        task = make_task(days=3)
        Reminder.objects.create(
            task=task,
            kind=Reminder.Kind.AUTO_3DAYS,
            message='recorded by another worker',
            status=Reminder.Status.SENT,
            sent_at=now,
        )

        assert deliver_reminder(task, Reminder.Kind.AUTO_3DAYS, now, delivery) is None
        assert task.reminders.count() == 1
        assert delivery.emails == []

    def test_manual_reminders_are_not_deduplicated(self, make_task, delivery, now):
        task = make_task(days=3)

        send_manual_reminder(task.pk, now=now, delivery=delivery)
        send_manual_reminder(task.pk, now=now, delivery=delivery)

        assert task.reminders.filter(kind=Reminder.Kind.MANUAL).count() == 2

    def test_reminder_content_comes_from_the_template_engine(self, make_task, delivery, now):
        task = make_task(days=1, priority=Task.Priority.URGENT)
        expected = render_reminder(task, Reminder.Kind.AUTO_1DAY, Reminder.Tone.FORMAL)

        reminder = deliver_reminder(task, Reminder.Kind.AUTO_1DAY, now, delivery)

        assert (reminder.subject, reminder.message) == expected
        task.refresh_from_db()
        assert task.reminder_count == 1
        assert task.last_reminder_sent == now


class TestEscalation:

    def test_escalated_task_is_never_escalated_again(self, make_task, delivery, now):
        task = make_task(days=-5, priority=Task.Priority.URGENT)

        for day in range(4):
            run_evaluation_cycle(now=now + timedelta(days=day), delivery=delivery)

        assert len(delivery.escalations) == 1
        assert task.reminders.filter(kind=Reminder.Kind.ESCALATION).count() == 1

    def test_failed_escalation_is_retried_next_cycle(self, make_task, delivery, now):
        task = make_task(days=-4, priority=Task.Priority.MEDIUM)
        delivery.escalation_fail_with = 'escalation webhook down'

        first = run_evaluation_cycle(now=now, delivery=delivery)

        task.refresh_from_db()
        assert task.escalated is False
        assert task.escalated_at is None
        assert first.escalations == 0
        assert first.results[0].escalation_error == 'escalation webhook down'
        assert first.results[0].escalation_reason == 'overdue by 4 days'
        assert not task.reminders.filter(kind=Reminder.Kind.ESCALATION).exists()

        delivery.escalation_fail_with = None
        second = run_evaluation_cycle(now=now, delivery=delivery)

        task.refresh_from_db()
        assert task.escalated is True
        assert second.escalations == 1
        assert len(delivery.escalations) == 2

    def test_three_unanswered_reminders_escalate(self, make_task, delivery, now):
        task = make_task(days=10, priority=Task.Priority.LOW)
        for days_ago in (3, 2, 1):
            Reminder.objects.create(
                task=task,
                kind=Reminder.Kind.MANUAL,
                message='ping',
                status=Reminder.Status.SENT,
                sent_at=now - timedelta(days=days_ago),
            )

        result = run_evaluation_cycle(now=now, delivery=delivery)

        assert result.results[0].escalation_reason == 'no response after 3 reminders'
        task.refresh_from_db()
        assert task.escalated is True

    def test_acknowledged_history_does_not_escalate(self, make_task, delivery, now):
        task = make_task(days=10, priority=Task.Priority.LOW)
        for days_ago in (3, 2, 1):
            Reminder.objects.create(
                task=task,
                kind=Reminder.Kind.MANUAL,
                message='ping',
                status=Reminder.Status.SENT,
                sent_at=now - timedelta(days=days_ago),
                response_received=days_ago == 1,
            )

        run_evaluation_cycle(now=now, delivery=delivery)

        task.refresh_from_db()
        assert task.escalated is False
        assert delivery.escalations == []


class TestFailureHandling:

    def test_delivery_failure_marks_reminder_failed(self, make_task, delivery, now):
        task = make_task(days=3)
        delivery.fail_with = 'SMTP timeout'

        result = run_evaluation_cycle(now=now, delivery=delivery)

        reminder = task.reminders.get()
        assert reminder.status == Reminder.Status.FAILED
        assert reminder.error_message == 'SMTP timeout'

        task.refresh_from_db()
        assert task.reminder_count == 0
        assert task.last_reminder_sent is None
        assert result.reminders_sent == 0
        assert result.results[0].error == 'SMTP timeout'

    def test_transport_exception_is_recorded_as_failure(self, make_task, delivery, now):
        broken = make_task(days=3, title='Broken')
        fine = make_task(days=3, title='Fine')
        delivery.raise_for = {broken.pk}

        result = run_evaluation_cycle(now=now, delivery=delivery)

        assert broken.reminders.get().status == Reminder.Status.FAILED
        assert fine.reminders.get().status == Reminder.Status.SENT
        assert result.reminders_sent == 1

    def test_one_task_error_does_not_abort_the_cycle(self, make_task, delivery, now):
        first = make_task(days=3, title='First')
        second = make_task(days=3, title='Second')
        original = scheduler.reminder_kind_for

        def flaky_kind_for(task, when):
            if task.pk == first.pk:
                raise RuntimeError('corrupt task')
            return original(task, when)

        with patch.object(scheduler, 'reminder_kind_for', side_effect=flaky_kind_for):
            result = run_evaluation_cycle(now=now, delivery=delivery)

        outcomes = {r.task_id: r for r in result.results}
        assert outcomes[first.pk].error == 'corrupt task'
        assert outcomes[second.pk].sent is True
        assert len(result.failures) == 1
        assert second.reminders.count() == 1


class TestCycleLock:

    def test_concurrent_cycle_is_rejected(self, make_task, delivery, now):
        make_task(days=3)

        with cycle_lock():
            with pytest.raises(CycleAlreadyRunning):
                run_evaluation_cycle(now=now, delivery=delivery)

        assert Reminder.objects.count() == 0
        assert run_evaluation_cycle(now=now, delivery=delivery).reminders_sent == 1

    def test_lock_is_released_after_an_error(self, delivery, now):
        with patch.object(scheduler.Task.objects, 'open', side_effect=RuntimeError('db down')):
            with pytest.raises(RuntimeError):
                run_evaluation_cycle(now=now, delivery=delivery)

        run_evaluation_cycle(now=now, delivery=delivery)


# ============================================================================
# Manual reminders
# ============================================================================


class TestManualReminder:

    def test_tone_progresses_with_each_successful_send(self, make_task, delivery, now):
        task = make_task(days=5)

        tones = [
            send_manual_reminder(task.pk, now=now, delivery=delivery).tone
            for _ in range(3)
        ]

        assert tones == [Reminder.Tone.FORMAL, Reminder.Tone.FRIENDLY, Reminder.Tone.CASUAL]
        task.refresh_from_db()
        assert task.reminder_count == 3

    def test_custom_message(self, make_task, delivery, now):
        task = make_task(days=5)

        reminder = send_manual_reminder(task.pk, message='  Please send the draft.  ', now=now, delivery=delivery)

        assert reminder.message == 'Please send the draft.'
        assert reminder.ai_generated is False
        assert reminder.subject == 'Follow-up: "Quarterly report"'

    def test_blank_message_uses_template(self, make_task, delivery, now):
        task = make_task(days=5)

        reminder = send_manual_reminder(task.pk, message='   ', now=now, delivery=delivery)

        assert reminder.ai_generated is True
        assert reminder.message.startswith('Hi Sam Lee,')

    def test_both_channels(self, make_task, delivery, now):
        task = make_task(days=5)

        reminder = send_manual_reminder(task.pk, channel=Reminder.Channel.BOTH, now=now, delivery=delivery)

        assert reminder.status == Reminder.Status.SENT
        assert reminder.tracking_id == f'email-{reminder.pk}'
        assert len(delivery.emails) == 1
        assert len(delivery.chats) == 1

    def test_unknown_task(self, db, delivery, now):
        with pytest.raises(TaskNotFound):
            send_manual_reminder(9999, now=now, delivery=delivery)


# ============================================================================
# Delivery callback and acknowledgment
# ============================================================================


@pytest.fixture
def sent_reminder(make_task, now):
    task = make_task(days=3)
    return Reminder.objects.create(
        task=task,
        kind=Reminder.Kind.AUTO_3DAYS,
        message='hello',
        status=Reminder.Status.SENT,
        sent_at=now,
    )


class TestDeliveryCallback:

    def test_delivered(self, sent_reminder, now):
        delivered_at = now + timedelta(minutes=3)

        reminder = process_delivery_callback(sent_reminder.pk, 'delivered', delivered_at=delivered_at)

        assert reminder.status == Reminder.Status.DELIVERED
        assert reminder.delivered_at == delivered_at
        assert reminder.sent_at == now

    def test_late_failure(self, sent_reminder):
        reminder = process_delivery_callback(sent_reminder.pk, 'failed', error_message='bounced')

        assert reminder.status == Reminder.Status.FAILED
        assert reminder.error_message == 'bounced'

    def test_repeated_status_is_accepted(self, sent_reminder):
        process_delivery_callback(sent_reminder.pk, 'delivered')
        reminder = process_delivery_callback(sent_reminder.pk, 'delivered')

        assert reminder.status == Reminder.Status.DELIVERED

    def test_terminal_state_cannot_change(self, sent_reminder):
        process_delivery_callback(sent_reminder.pk, 'delivered')

        with pytest.raises(ValidationError):
            process_delivery_callback(sent_reminder.pk, 'failed')

    def test_cannot_go_back_to_pending(self, sent_reminder):
        with pytest.raises(ValidationError):
            process_delivery_callback(sent_reminder.pk, 'pending')

    def test_unknown_status(self, sent_reminder):
        with pytest.raises(ValidationError):
            process_delivery_callback(sent_reminder.pk, 'bounced')

    def test_unknown_reminder(self, db):
        with pytest.raises(ReminderNotFound):
            process_delivery_callback(12345, 'delivered')


class TestRecordResponse:

    def test_first_response_time_is_kept(self, sent_reminder, now):
        first = now + timedelta(hours=1)

        record_response(sent_reminder.pk, responded_at=first)
        reminder = record_response(sent_reminder.pk, responded_at=now + timedelta(hours=5))

        assert reminder.response_received is True
        assert reminder.responded_at == first

    def test_unknown_reminder(self, db):
        with pytest.raises(ReminderNotFound):
            record_response(12345)
