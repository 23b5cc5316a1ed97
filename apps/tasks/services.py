"""
Service layer for tasks app.

All business logic for task operations is centralized here, so the API
views and the admin share the same rules.

Services:
- infer_priority: Keyword-based priority guess from a description
- create_task: Create new task
- update_task: Update task fields with status workflow validation
- delete_task: Delete a task and its reminders
- get_task: Fetch a task or raise TaskNotFound
"""

import logging

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.utils import timezone

from apps.notifications.exceptions import TaskNotFound
from .models import Task

logger = logging.getLogger(__name__)


PRIORITY_KEYWORDS = (
    (Task.Priority.URGENT, ('urgent', 'asap', 'critical', 'emergency', 'immediately')),
    (Task.Priority.HIGH, ('important', 'priority', 'key', 'essential')),
)


def infer_priority(description):
    """
    Guess a priority from keywords in ``description``.
    Urgent keywords win over high ones; no match means medium.
    """
    text = (description or '').lower()
    for priority, keywords in PRIORITY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return priority
    return Task.Priority.MEDIUM


def _clean_required(value, label):
    if not value or not str(value).strip():
        raise ValidationError(f'{label} is required.')
    return str(value).strip()


def _clean_email(value):
    value = _clean_required(value, 'Assignee email')
    validate_email(value)
    return value


def _clean_priority(value):
    if value not in Task.Priority.values:
        raise ValidationError(f'Invalid priority: {value}')
    return value


def create_task(
    title: str,
    assignee_name: str,
    assignee_email: str,
    due_date,
    description: str = '',
    priority: str = None,
    assignee_chat_id: str = '',
):
    """
    Create a new task.

    Args:
        title: Task title (required)
        assignee_name: Assignee display name (required)
        assignee_email: Assignee email address (required)
        due_date: Aware datetime when the task is due (required)
        description: Task description (optional)
        priority: low/medium/high/urgent; inferred from description if omitted
        assignee_chat_id: Chat handle for chat reminders (optional)

    Returns:
        Created Task instance

    Raises:
        ValidationError: If required fields are missing or invalid
    """
    title = _clean_required(title, 'Task title')
    assignee_name = _clean_required(assignee_name, 'Assignee name')
    assignee_email = _clean_email(assignee_email)
    if not due_date:
        raise ValidationError('Due date is required.')

    description = description.strip() if description else ''
    if not priority:
        priority = infer_priority(description) if description else Task.Priority.MEDIUM
    priority = _clean_priority(priority)

    task = Task.objects.create(
        title=title,
        description=description,
        assignee_name=assignee_name,
        assignee_email=assignee_email,
        assignee_chat_id=(assignee_chat_id or '').strip(),
        due_date=due_date,
        priority=priority,
    )
    logger.info(f'Task {task.pk} created: "{task.title}" ({task.priority}) for {task.assignee_email}')
    return task


def update_task(task, **kwargs):
    """
    Update task fields.

    Editable fields: title, description, assignee_name, assignee_email,
    assignee_chat_id, priority, due_date, status. Engine-owned fields
    (reminder counters, escalation) are not editable here.

    Status changes follow the workflow in Task.can_transition_to;
    setting the current status again is a no-op.

    Returns:
        Updated Task instance

    Raises:
        ValidationError: If a value or status transition is invalid
    """
    editable_fields = [
        'title', 'description', 'assignee_name', 'assignee_email',
        'assignee_chat_id', 'priority', 'due_date', 'status',
    ]
    changed = []

    for field in editable_fields:
        if field not in kwargs:
            continue
        new_value = kwargs[field]

        if field == 'title':
            new_value = _clean_required(new_value, 'Task title')
        elif field == 'assignee_name':
            new_value = _clean_required(new_value, 'Assignee name')
        elif field == 'assignee_email':
            new_value = _clean_email(new_value)
        elif field in ('description', 'assignee_chat_id'):
            new_value = new_value.strip() if new_value else ''
        elif field == 'priority':
            new_value = _clean_priority(new_value)
        elif field == 'due_date':
            if not new_value:
                raise ValidationError('Due date is required.')
        elif field == 'status':
            if new_value not in Task.Status.values:
                raise ValidationError(f'Invalid status: {new_value}')
            if new_value != task.status and not task.can_transition_to(new_value):
                raise ValidationError(
                    f"Cannot change status from '{task.get_status_display()}' to "
                    f"'{Task.Status(new_value).label}'."
                )

        if getattr(task, field) != new_value:
            if field == 'status':
                old_status = task.status
                if new_value == Task.Status.COMPLETED:
                    task.completed_at = timezone.now()
                elif old_status == Task.Status.COMPLETED:
                    task.completed_at = None
                changed.append('completed_at')
                logger.info(f'Task {task.pk} status changed from {old_status} to {new_value}')
            setattr(task, field, new_value)
            changed.append(field)

    if changed:
        # Only the edited columns; reminder counters and escalation belong to the engine
        task.save(update_fields=changed + ['updated_at'])

    return task


def delete_task(task):
    """Delete a task; its reminders go with it (cascade)."""
    task_id = task.pk
    with transaction.atomic():
        task.delete()
    logger.info(f'Task {task_id} and its reminders deleted')


def get_task(task_id):
    try:
        return Task.objects.get(pk=task_id)
    except Task.DoesNotExist:
        raise TaskNotFound(task_id)
