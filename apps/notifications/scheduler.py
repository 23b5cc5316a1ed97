"""
Reminder evaluation engine.

One evaluation cycle walks every open task and, per task:
1. picks the automatic reminder kind due today (if any)
2. skips it when the same kind already went out today
3. renders, records and delivers the reminder
4. re-checks the escalation rules against the full reminder history

Also hosts the operations that touch a single reminder outside a cycle:
manual reminders, delivery confirmation callbacks and acknowledgments.

Only one cycle may run at a time (cache-backed single-flight lock), and
the reminders table carries a unique constraint on (task, kind, day) for
automatic kinds, so the duplicate check cannot race.
"""

import logging
import uuid
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import List, Optional

from django.conf import settings
from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from apps.reminders.models import Reminder
from apps.tasks.models import Task
from .content import render_escalation_body, render_reminder, render_subject
from .exceptions import CycleAlreadyRunning, ReminderNotFound, TaskNotFound
from .policies import reminder_kind_for, select_tone, should_escalate
from .services import DeliveryResult, get_delivery_channel

logger = logging.getLogger(__name__)

CYCLE_LOCK_KEY = 'notifications:reminder-cycle-lock'


@dataclass
class TaskOutcome:
    """What one cycle did for one task."""
    task_id: int
    kind: Optional[str] = None
    reminder_id: Optional[int] = None
    sent: bool = False
    skipped: bool = False
    error: Optional[str] = None
    escalation_reason: Optional[str] = None
    escalated: bool = False
    escalation_error: Optional[str] = None


@dataclass
class CycleResult:
    started_at: datetime
    reminders_sent: int = 0
    escalations: int = 0
    results: List[TaskOutcome] = field(default_factory=list)

    @property
    def failures(self):
        return [r for r in self.results if r.error or r.escalation_error]

    def to_dict(self):
        return {
            'started_at': self.started_at.isoformat(),
            'tasks_evaluated': len(self.results),
            'reminders_sent': self.reminders_sent,
            'escalations': self.escalations,
            'failures': len(self.failures),
            'results': [asdict(r) for r in self.results],
        }


# =============================================================================
# Evaluation Cycle
# =============================================================================

@contextmanager
def cycle_lock():
    """Single-flight guard; raises CycleAlreadyRunning if the lock is held."""
    token = uuid.uuid4().hex
    if not cache.add(CYCLE_LOCK_KEY, token, timeout=settings.REMINDER_CYCLE_LOCK_TIMEOUT):
        raise CycleAlreadyRunning('A reminder evaluation cycle is already running.')
    try:
        yield
    finally:
        if cache.get(CYCLE_LOCK_KEY) == token:
            cache.delete(CYCLE_LOCK_KEY)


def run_evaluation_cycle(now=None, delivery=None):
    """
    Run one evaluation pass over all open tasks.

    Args:
        now: Evaluation time (defaults to timezone.now())
        delivery: DeliveryChannel instance (defaults to the configured one)

    Returns:
        CycleResult with per-task outcomes

    Raises:
        CycleAlreadyRunning: If another cycle holds the lock
    """
    now = now or timezone.now()
    delivery = delivery or get_delivery_channel()

    with cycle_lock():
        # Snapshot taken once; tasks created mid-cycle wait for the next run
        tasks = list(Task.objects.open().order_by('due_date', 'pk'))
        logger.info(f'Reminder cycle started at {now.isoformat()}: {len(tasks)} open task(s)')

        result = CycleResult(started_at=now)
        for task in tasks:
            outcome = evaluate_task(task, now, delivery)
            result.results.append(outcome)
            if outcome.sent:
                result.reminders_sent += 1
            if outcome.escalated:
                result.escalations += 1

    logger.info(
        f'Reminder cycle complete. Sent {result.reminders_sent} reminder(s), '
        f'{result.escalations} escalation(s), {len(result.failures)} failure(s).'
    )
    return result


def evaluate_task(task, now, delivery):
    """
    Evaluate a single task. Never raises: errors are logged and reported
    on the returned TaskOutcome so the rest of the cycle carries on.
    """
    outcome = TaskOutcome(task_id=task.pk)

    try:
        kind = reminder_kind_for(task, now)
        if kind:
            outcome.kind = kind
            if Reminder.objects.sent_on_day(task, kind, timezone.localdate(now)).exists():
                logger.debug(f'Task {task.pk}: {kind} already sent today, skipping')
                outcome.skipped = True
            else:
                reminder = deliver_reminder(task, kind, now, delivery)
                if reminder is None:
                    outcome.skipped = True
                else:
                    outcome.reminder_id = reminder.pk
                    outcome.sent = reminder.status == Reminder.Status.SENT
                    if reminder.status == Reminder.Status.FAILED:
                        outcome.error = reminder.error_message

        history = list(Reminder.objects.for_task(task))
        decision = should_escalate(task, history, now)
        if decision.escalate and not task.escalated:
            outcome.escalation_reason = decision.reason
            escalation = escalate_task(task, decision.reason, now, delivery)
            outcome.escalated = escalation.success
            if not escalation.success:
                outcome.escalation_error = escalation.error

    except Exception as e:
        logger.exception(f'Reminder evaluation failed for task {task.pk}')
        outcome.error = str(e)

    return outcome


# =============================================================================
# Sending
# =============================================================================

def _call_delivery(send, *args):
    """Run a delivery call, recording unexpected errors as a failed result."""
    try:
        return send(*args)
    except Exception as e:
        logger.exception('Delivery channel raised an unexpected error')
        return DeliveryResult.failed(e)


def deliver_reminder(task, kind, now, delivery, channel=Reminder.Channel.EMAIL, custom_message=None):
    """
    Render, record and deliver one reminder.

    The reminder is stored as pending before the delivery call and finalized
    to sent or failed afterwards. Task counters only move on success.

    Returns:
        The Reminder, or None if an automatic reminder of this kind was
        already recorded for today (unique constraint hit).
    """
    tone = select_tone(task, now)
    subject, body = render_reminder(task, kind, tone)
    message = custom_message or body

    try:
        with transaction.atomic():
            reminder = Reminder.objects.create(
                task=task,
                kind=kind,
                channel=channel,
                tone=tone,
                subject=subject,
                message=message,
                ai_generated=not custom_message,
                status=Reminder.Status.PENDING,
                sent_at=now,
            )
    except IntegrityError:
        if kind in Reminder.AUTO_KINDS:
            logger.info(f'Task {task.pk}: concurrent {kind} reminder already recorded, skipping')
            return None
        raise

    result = _call_delivery(delivery.send, task, reminder)

    if result.success:
        reminder.status = Reminder.Status.SENT
        reminder.tracking_id = result.tracking_id
        reminder.save(update_fields=['status', 'tracking_id', 'updated_at'])

        # Atomic increment
        Task.objects.filter(pk=task.pk).update(
            reminder_count=F('reminder_count') + 1,
            last_reminder_sent=now,
            updated_at=timezone.now(),
        )
        task.refresh_from_db(fields=['reminder_count', 'last_reminder_sent', 'updated_at'])
        logger.info(f'Reminder sent for task {task.pk} ({kind}, {tone}, mode={result.mode})')
    else:
        reminder.status = Reminder.Status.FAILED
        reminder.error_message = result.error
        reminder.save(update_fields=['status', 'error_message', 'updated_at'])
        logger.warning(f'Reminder failed for task {task.pk} ({kind}): {result.error}')

    return reminder


def escalate_task(task, reason, now, delivery):
    """
    Escalate ``task``. The latch and the escalation record are only written
    after the escalation delivery succeeds, so a failure is retried by the
    next cycle that still meets the trigger.

    Returns:
        DeliveryResult of the escalation call
    """
    logger.warning(f'Escalating task {task.pk} "{task.title}": {reason}')

    result = _call_delivery(delivery.send_escalation, task, reason)
    if not result.success:
        logger.warning(f'Escalation delivery failed for task {task.pk}: {result.error}')
        return result

    with transaction.atomic():
        task.escalated = True
        task.escalated_at = now
        task.save(update_fields=['escalated', 'escalated_at', 'updated_at'])

        Reminder.objects.create(
            task=task,
            kind=Reminder.Kind.ESCALATION,
            channel=Reminder.Channel.EMAIL,
            tone=Reminder.Tone.URGENT,
            subject=render_subject(task, Reminder.Kind.ESCALATION),
            message=render_escalation_body(task, reason),
            ai_generated=True,
            status=Reminder.Status.SENT,
            tracking_id=result.tracking_id,
            sent_at=now,
        )

    return result


def send_manual_reminder(task_id, message=None, channel=Reminder.Channel.EMAIL, now=None, delivery=None):
    """
    Send an operator-triggered reminder, outside of any schedule.

    Manual reminders are not deduplicated. Without a custom message the
    body is rendered with the task's current tone.

    Raises:
        TaskNotFound: If task_id does not resolve
    """
    now = now or timezone.now()
    delivery = delivery or get_delivery_channel()

    try:
        task = Task.objects.get(pk=task_id)
    except Task.DoesNotExist:
        raise TaskNotFound(task_id)

    custom_message = message.strip() if message and message.strip() else None
    return deliver_reminder(
        task,
        Reminder.Kind.MANUAL,
        now,
        delivery,
        channel=channel,
        custom_message=custom_message,
    )


# =============================================================================
# Inbound Signals
# =============================================================================

def _get_reminder(reminder_id):
    try:
        return Reminder.objects.get(pk=reminder_id)
    except Reminder.DoesNotExist:
        raise ReminderNotFound(reminder_id)


def process_delivery_callback(reminder_id, status, delivered_at=None, error_message=None):
    """
    Apply a delivery confirmation from the delivery subsystem.

    Moves ``sent`` to ``delivered`` or records a late failure. Repeating
    the current status is accepted as a no-op (apart from a new error text).

    Raises:
        ReminderNotFound: If reminder_id does not resolve
        ValidationError: If the status is unknown or the transition invalid
    """
    reminder = _get_reminder(reminder_id)

    if status not in Reminder.Status.values:
        raise ValidationError(f"Invalid reminder status: '{status}'.")

    if status != reminder.status and not reminder.can_transition_to(status):
        raise ValidationError(
            f"Cannot change reminder status from '{reminder.status}' to '{status}'."
        )

    old_status = reminder.status
    reminder.status = status
    if status == Reminder.Status.DELIVERED and not reminder.delivered_at:
        reminder.delivered_at = delivered_at or timezone.now()
    if error_message:
        reminder.error_message = error_message
    reminder.save()

    logger.info(f'Delivery callback for reminder {reminder.pk}: {old_status} → {status}')
    return reminder


def record_response(reminder_id, responded_at=None):
    """
    Mark a reminder as acknowledged by the assignee.
    The first acknowledgment time is kept on repeated calls.

    Raises:
        ReminderNotFound: If reminder_id does not resolve
    """
    reminder = _get_reminder(reminder_id)

    if not reminder.response_received:
        reminder.response_received = True
        reminder.responded_at = responded_at or timezone.now()
        reminder.save(update_fields=['response_received', 'responded_at', 'updated_at'])

    return reminder
