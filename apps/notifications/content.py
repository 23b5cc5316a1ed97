"""
Reminder content rendering.

Messages are picked from a fixed two-level table: tone selects the voice,
kind selects what the message is about. Rendering is deterministic for a
given task snapshot, kind and tone.
"""

from django.utils import dateformat, timezone

from apps.reminders.models import Reminder
from apps.tasks.models import Task


Kind = Reminder.Kind
Tone = Reminder.Tone

DUE_DATE_FORMAT = 'D, M j, Y'
URGENT_SUBJECT_PREFIX = '[URGENT] '


BODY_TEMPLATES = {
    Tone.FORMAL: {
        Kind.AUTO_3DAYS: (
            'Hi {name},\n\n'
            'This is a friendly reminder that "{title}" is due in 3 days ({due}).\n\n'
            'Please let us know if you need any support to complete this task on time.\n\n'
            'Best regards'
        ),
        Kind.AUTO_1DAY: (
            'Hi {name},\n\n'
            'Just a heads up that "{title}" is due tomorrow ({due}).\n\n'
            "Please ensure it's completed on time or reach out if you need assistance.\n\n"
            'Thank you'
        ),
        Kind.AUTO_DEADLINE: (
            'Hi {name},\n\n'
            '"{title}" is due today ({due}).\n\n'
            'Please mark it as complete once finished.\n\n'
            'Regards'
        ),
        Kind.AUTO_OVERDUE: (
            'Hi {name},\n\n'
            '"{title}" was due on {due} and is now overdue.\n\n'
            'Please complete it as soon as possible or update us on the status.\n\n'
            'Thank you'
        ),
        Kind.MANUAL: (
            'Hi {name},\n\n'
            'Following up on "{title}", due {due}.\n\n'
            'Could you share a quick update on where this stands?\n\n'
            'Best regards'
        ),
    },
    Tone.FRIENDLY: {
        Kind.AUTO_3DAYS: (
            'Hey {name}!\n\n'
            'Quick reminder: "{title}" is coming up in 3 days ({due}).\n\n'
            "You've got this! Let me know if you need anything.\n\n"
            'Cheers!'
        ),
        Kind.AUTO_1DAY: (
            'Hey {name}!\n\n'
            '"{title}" is due tomorrow ({due}).\n\n'
            'Almost there! Ping me if you need help.\n\n'
            'Thanks!'
        ),
        Kind.AUTO_DEADLINE: (
            'Hi {name}!\n\n'
            'Today\'s the day! "{title}" is due today.\n\n'
            "Let us know once it's done!\n\n"
            'Best'
        ),
        Kind.AUTO_OVERDUE: (
            'Hey {name},\n\n'
            'Just checking in - "{title}" was due on {due}.\n\n'
            "What's the status? Can we help with anything?\n\n"
            'Thanks!'
        ),
        Kind.MANUAL: (
            'Hey {name}!\n\n'
            'Checking in on "{title}" (due {due}).\n\n'
            'How is it going? Shout if anything is blocking you.\n\n'
            'Thanks!'
        ),
    },
    Tone.CASUAL: {
        Kind.AUTO_3DAYS: (
            'Hey {name},\n\n'
            '"{title}" - 3 days to go! ({due})\n\n'
            'Just a nudge.'
        ),
        Kind.AUTO_1DAY: (
            '{name},\n\n'
            '"{title}" - tomorrow\'s the deadline!\n\n'
            'You got this!'
        ),
        Kind.AUTO_DEADLINE: (
            '{name},\n\n'
            '"{title}" - due today!\n\n'
            'Wrap it up when you can!'
        ),
        Kind.AUTO_OVERDUE: (
            '{name},\n\n'
            '"{title}" is past due. What\'s up?\n\n'
            'Need help?'
        ),
        Kind.MANUAL: (
            '{name},\n\n'
            'Any news on "{title}"? ({due})\n\n'
            'Drop a quick update when you can.'
        ),
    },
    Tone.URGENT: {
        Kind.AUTO_3DAYS: (
            'ATTENTION: {name},\n\n'
            '"{title}" - HIGH PRIORITY\n'
            'Due: {due} (3 days)\n\n'
            'Immediate attention required.'
        ),
        Kind.AUTO_1DAY: (
            'URGENT: {name},\n\n'
            '"{title}" - CRITICAL DEADLINE\n'
            'Due: Tomorrow ({due})\n\n'
            'Please prioritize this task.'
        ),
        Kind.AUTO_DEADLINE: (
            'URGENT: {name},\n\n'
            '"{title}" - DUE TODAY\n'
            'Deadline: {due}\n\n'
            'Complete immediately.'
        ),
        Kind.AUTO_OVERDUE: (
            'CRITICAL: {name},\n\n'
            '"{title}" - OVERDUE\n'
            'Was due: {due}\n\n'
            'Escalation pending. Update status ASAP.'
        ),
        Kind.MANUAL: (
            'URGENT: {name},\n\n'
            '"{title}" needs your attention now.\n'
            'Due: {due}\n\n'
            'Reply with a status update today.'
        ),
    },
}

SUBJECT_TEMPLATES = {
    Kind.AUTO_3DAYS: '{prefix}Reminder: "{title}" due in 3 days',
    Kind.AUTO_1DAY: '{prefix}Reminder: "{title}" due tomorrow',
    Kind.AUTO_DEADLINE: '{prefix}Reminder: "{title}" due TODAY',
    Kind.AUTO_OVERDUE: '{prefix}OVERDUE: "{title}"',
    Kind.MANUAL: '{prefix}Follow-up: "{title}"',
    Kind.ESCALATION: 'ESCALATION: "{title}" - Action Required',
}

FALLBACK_SUBJECT = 'Reminder: "{title}"'


def format_due_date(value):
    """Format a due date in the configured time zone, e.g. ``Mon, Oct 19, 2026``."""
    if timezone.is_aware(value):
        value = timezone.localtime(value)
    return dateformat.format(value, DUE_DATE_FORMAT)


def render_subject(task, kind):
    prefix = URGENT_SUBJECT_PREFIX if task.priority == Task.Priority.URGENT else ''
    template = SUBJECT_TEMPLATES.get(kind, FALLBACK_SUBJECT)
    return template.format(prefix=prefix, title=task.title)


def render_body(task, kind, tone):
    """Unknown tone falls back to formal, unknown kind to the 3-day warning."""
    tone_templates = BODY_TEMPLATES.get(tone, BODY_TEMPLATES[Tone.FORMAL])
    template = tone_templates.get(kind, tone_templates[Kind.AUTO_3DAYS])
    return template.format(
        name=task.assignee_name,
        title=task.title,
        due=format_due_date(task.due_date),
    )


def render_reminder(task, kind, tone):
    """Return ``(subject, body)`` for a reminder."""
    return render_subject(task, kind), render_body(task, kind, tone)


def render_escalation_body(task, reason):
    return f'Task escalated: {reason}'
