"""
Service layer for reports app.

Read-only aggregation over tasks and reminders:
- get_reminder_stats: reminder counts by status, kind and tone
- get_dashboard_stats: task counts, recent activity and reminder stats
- get_response_patterns: when and to which tone assignees respond
- suggest_send_hour: best local hour to reach an assignee for a task
"""

import math

from django.db.models import Count
from django.utils import timezone

from apps.reminders.models import Reminder
from apps.tasks.models import Task


DEFAULT_SEND_HOURS = {
    Task.Priority.URGENT: 9,
    Task.Priority.HIGH: 10,
    Task.Priority.MEDIUM: 14,
    Task.Priority.LOW: 16,
}
FALLBACK_SEND_HOUR = 10

DUE_SOON_DAYS = 3
RECENT_LIMIT = 5


def _count_by(queryset, field):
    rows = queryset.order_by().values(field).annotate(count=Count('id'))
    return {row[field]: row['count'] for row in rows}


def get_reminder_stats():
    """
    Returns dict with reminder counts:
    - total, pending, sent, delivered, failed
    - by_kind / by_tone: {value: count}
    """
    reminders = Reminder.objects.all()
    by_status = _count_by(reminders, 'status')

    return {
        'total': sum(by_status.values()),
        'pending': by_status.get(Reminder.Status.PENDING, 0),
        'sent': by_status.get(Reminder.Status.SENT, 0),
        'delivered': by_status.get(Reminder.Status.DELIVERED, 0),
        'failed': by_status.get(Reminder.Status.FAILED, 0),
        'by_kind': _count_by(reminders, 'kind'),
        'by_tone': _count_by(reminders, 'tone'),
    }


def get_dashboard_stats(now=None):
    """
    Task and reminder overview.

    ``overdue`` and ``due_soon`` only count open tasks; ``due_soon`` covers
    the next three days.
    """
    now = now or timezone.now()
    by_status = _count_by(Task.objects.all(), 'status')

    recent_tasks = Task.objects.order_by('-created_at', '-pk')[:RECENT_LIMIT]
    recent_reminders = Reminder.objects.select_related('task').order_by('-sent_at', '-pk')[:RECENT_LIMIT]

    return {
        'tasks': {
            'total': sum(by_status.values()),
            'pending': by_status.get(Task.Status.PENDING, 0),
            'in_progress': by_status.get(Task.Status.IN_PROGRESS, 0),
            'completed': by_status.get(Task.Status.COMPLETED, 0),
            'overdue': Task.objects.overdue(now).count(),
            'due_soon': Task.objects.due_within(DUE_SOON_DAYS, now).count(),
            'by_priority': _count_by(Task.objects.all(), 'priority'),
            'escalated': Task.objects.filter(escalated=True).count(),
        },
        'reminders': get_reminder_stats(),
        'recent': {
            'tasks': [
                {
                    'id': task.pk,
                    'title': task.title,
                    'assignee_name': task.assignee_name,
                    'due_date': task.due_date.isoformat(),
                    'status': task.status,
                    'priority': task.priority,
                }
                for task in recent_tasks
            ],
            'reminders': [
                {
                    'id': reminder.pk,
                    'task_id': reminder.task_id,
                    'task_title': reminder.task.title,
                    'kind': reminder.kind,
                    'status': reminder.status,
                    'sent_at': reminder.sent_at.isoformat(),
                }
                for reminder in recent_reminders
            ],
        },
    }


def get_response_patterns():
    """
    Analyse acknowledged reminders.

    Returns dict with:
    - responses_by_hour: {0..23: count}, local time of the response
    - optimal_send_hour: hour with most responses (earliest on ties)
    - responses_by_tone: {tone: count}
    - avg_response_time_hours: mean sent_at → responded_at, 2 decimals
    - total_responses_analyzed
    """
    responded = list(
        Reminder.objects.filter(response_received=True, responded_at__isnull=False)
    )

    responses_by_hour = {hour: 0 for hour in range(24)}
    response_times = []
    for reminder in responded:
        responses_by_hour[timezone.localtime(reminder.responded_at).hour] += 1
        response_times.append(
            (reminder.responded_at - reminder.sent_at).total_seconds() / 3600
        )

    optimal_send_hour = 0
    if responded:
        optimal_send_hour = max(responses_by_hour, key=lambda hour: (responses_by_hour[hour], -hour))

    avg_response_time = sum(response_times) / len(response_times) if response_times else 0

    return {
        'responses_by_hour': responses_by_hour,
        'optimal_send_hour': optimal_send_hour,
        'responses_by_tone': _count_by(Reminder.objects.filter(response_received=True), 'tone'),
        'avg_response_time_hours': round(avg_response_time, 2),
        'total_responses_analyzed': len(responded),
    }


def suggest_send_hour(task):
    """
    Suggested local hour for reaching the assignee of ``task``.

    Mean hour of past acknowledgments on this task (rounded half up), or a
    default for the task's priority when nothing was acknowledged yet.
    """
    hours = [
        timezone.localtime(responded_at).hour
        for responded_at in task.reminders.filter(
            response_received=True, responded_at__isnull=False,
        ).values_list('responded_at', flat=True)
    ]
    if hours:
        return math.floor(sum(hours) / len(hours) + 0.5)
    return DEFAULT_SEND_HOURS.get(task.priority, FALLBACK_SEND_HOUR)
