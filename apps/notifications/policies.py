"""
Reminder policies.

Pure decision functions used by the evaluation cycle:
- reminder_schedule: priority → day offsets at which reminders fire
- reminder_kind_for: which automatic reminder (if any) is due for a task
- select_tone: voice register based on reminder history
- should_escalate: ordered escalation rules

None of these read the clock or touch the database; ``now`` and the
reminder history are always passed in.
"""

from dataclasses import dataclass
from typing import Optional

from apps.reminders.models import Reminder
from apps.tasks.models import Task


OVERDUE_OFFSET = -1

REMINDER_SCHEDULES = {
    Task.Priority.URGENT: (3, 1, 0, OVERDUE_OFFSET),
    Task.Priority.HIGH: (3, 1, 0),
    Task.Priority.MEDIUM: (3, 0),
    Task.Priority.LOW: (3,),
}

# Days before due date → reminder kind
OFFSET_KINDS = {
    3: Reminder.Kind.AUTO_3DAYS,
    1: Reminder.Kind.AUTO_1DAY,
    0: Reminder.Kind.AUTO_DEADLINE,
}

ESCALATION_OVERDUE_DAYS = 2
ESCALATION_UNANSWERED_REMINDERS = 3


@dataclass(frozen=True)
class EscalationDecision:
    escalate: bool
    reason: Optional[str] = None


def reminder_schedule(priority):
    """Offsets (days before due) for a priority; unknown → medium schedule."""
    return REMINDER_SCHEDULES.get(priority, REMINDER_SCHEDULES[Task.Priority.MEDIUM])


def reminder_kind_for(task, now):
    """
    Pick the automatic reminder kind due for ``task`` at ``now``.

    Returns None when the task's day offset is not in its priority schedule.
    """
    offsets = reminder_schedule(task.priority)
    days_until = task.days_until_due(now)

    if days_until in OFFSET_KINDS:
        return OFFSET_KINDS[days_until] if days_until in offsets else None

    if days_until < 0 and task.is_overdue_at(now) and OVERDUE_OFFSET in offsets:
        return Reminder.Kind.AUTO_OVERDUE

    return None


def select_tone(task, now):
    """
    Overdue tasks always get the urgent tone; otherwise the tone relaxes
    as unanswered reminders pile up.
    """
    if task.is_overdue_at(now):
        return Reminder.Tone.URGENT
    if task.reminder_count == 0:
        return Reminder.Tone.FORMAL
    if task.reminder_count == 1:
        return Reminder.Tone.FRIENDLY
    return Reminder.Tone.CASUAL


def should_escalate(task, reminders, now):
    """
    Decide whether ``task`` needs escalating.

    Rules are checked in order and the first match sets the reason:
    1. urgent task that is overdue at all
    2. more than two days overdue
    3. three or more reminders and none acknowledged
    """
    if task.priority == Task.Priority.URGENT and task.is_overdue_at(now):
        return EscalationDecision(True, 'urgent task overdue')

    days_overdue = task.days_overdue(now)
    if days_overdue > ESCALATION_OVERDUE_DAYS:
        return EscalationDecision(True, f'overdue by {days_overdue} days')

    reminders = list(reminders)
    if (len(reminders) >= ESCALATION_UNANSWERED_REMINDERS
            and not any(r.response_received for r in reminders)):
        return EscalationDecision(True, 'no response after 3 reminders')

    return EscalationDecision(False)
