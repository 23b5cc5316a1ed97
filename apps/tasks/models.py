"""
Task management models.

Models:
- Task: Deadline-bound task with reminder counters and escalation latch

Derived values (overdue, days until due) are always computed against an
explicit ``now`` and never stored.
"""

import math
from datetime import timedelta

from django.db import models
from django.utils import timezone
from django.core.exceptions import ValidationError


SECONDS_PER_DAY = 24 * 60 * 60


class TaskQuerySet(models.QuerySet):

    def open(self):
        """Tasks the reminder engine still cares about."""
        return self.filter(status__in=Task.OPEN_STATUSES)

    def overdue(self, now=None):
        now = now or timezone.now()
        return self.open().filter(due_date__lt=now)

    def due_within(self, days, now=None):
        now = now or timezone.now()
        return self.open().filter(
            due_date__gte=now,
            due_date__lte=now + timedelta(days=days),
        )


class Task(models.Model):
    """
    Main Task model.

    Status workflow:
    - pending → in-progress → completed
    - in-progress may drop back to pending
    - completed may be re-opened to in-progress

    ``overdue`` is only a display label (see ``display_status``).
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        IN_PROGRESS = 'in-progress', 'In Progress'
        COMPLETED = 'completed', 'Completed'

    class Priority(models.TextChoices):
        LOW = 'low', 'Low'
        MEDIUM = 'medium', 'Medium'
        HIGH = 'high', 'High'
        URGENT = 'urgent', 'Urgent'

    OPEN_STATUSES = [Status.PENDING, Status.IN_PROGRESS]
    OVERDUE_LABEL = 'overdue'

    # Core fields
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    # Assignee contact details
    assignee_name = models.CharField(max_length=150)
    assignee_email = models.EmailField(db_index=True)
    assignee_chat_id = models.CharField(
        max_length=100,
        blank=True,
        help_text='Chat handle used by the chat delivery channel'
    )

    status = models.CharField(
        max_length=15,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    priority = models.CharField(
        max_length=10,
        choices=Priority.choices,
        default=Priority.MEDIUM,
        db_index=True,
    )
    due_date = models.DateTimeField(db_index=True)

    # Reminder tracking (maintained by the reminder engine)
    reminder_count = models.PositiveIntegerField(default=0)
    last_reminder_sent = models.DateTimeField(null=True, blank=True)

    # Escalation tracking; once set the latch never reverts
    escalated = models.BooleanField(default=False, db_index=True)
    escalated_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    objects = TaskQuerySet.as_manager()

    class Meta:
        verbose_name = 'task'
        verbose_name_plural = 'tasks'
        ordering = ['due_date']
        indexes = [
            models.Index(fields=['status', 'due_date'], name='tasks_task_status_1c2f0b_idx'),
            models.Index(fields=['priority', 'status'], name='tasks_task_priorit_6e9d4a_idx'),
        ]

    def __str__(self):
        return self.title

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_escalated = instance.__dict__.get('escalated', False)
        return instance

    def save(self, *args, **kwargs):
        update_fields = kwargs.get('update_fields')
        writes_latch = update_fields is None or 'escalated' in update_fields
        if writes_latch and not self.escalated and self._escalated_in_db():
            raise ValidationError('An escalated task cannot be un-escalated.')
        super().save(*args, **kwargs)
        self._loaded_escalated = self.escalated

    def _escalated_in_db(self):
        """The latch as loaded, or as it is now stored if this copy never saw it set."""
        if getattr(self, '_loaded_escalated', False):
            return True
        if self._state.adding or self.pk is None:
            return False
        return Task.objects.filter(pk=self.pk, escalated=True).exists()

    # ==========================================================================
    # Derived deadline values
    # ==========================================================================

    def is_overdue_at(self, now):
        return now > self.due_date and self.status != self.Status.COMPLETED

    def days_until_due(self, now):
        """Whole days until the due date, rounded up; negative once past due."""
        delta = self.due_date - now
        return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)

    def days_overdue(self, now):
        return max(0, -self.days_until_due(now))

    @property
    def is_overdue(self):
        """Check if task is past its due date and not completed."""
        return self.is_overdue_at(timezone.now())

    @property
    def is_open(self):
        return self.status in self.OPEN_STATUSES

    def display_status(self, now=None):
        now = now or timezone.now()
        if self.is_overdue_at(now):
            return self.OVERDUE_LABEL
        return self.status

    # ==========================================================================
    # Status Workflow Methods
    # ==========================================================================

    def can_transition_to(self, new_status):
        """Check if status transition is valid."""
        valid_transitions = {
            self.Status.PENDING: [self.Status.IN_PROGRESS, self.Status.COMPLETED],
            self.Status.IN_PROGRESS: [self.Status.PENDING, self.Status.COMPLETED],
            self.Status.COMPLETED: [self.Status.IN_PROGRESS],
        }
        return new_status in valid_transitions.get(self.status, [])

    def to_dict(self, now=None):
        now = now or timezone.now()
        return {
            'id': self.pk,
            'title': self.title,
            'description': self.description,
            'assignee': {
                'name': self.assignee_name,
                'email': self.assignee_email,
                'chat_id': self.assignee_chat_id or None,
            },
            'due_date': self.due_date.isoformat(),
            'status': self.status,
            'display_status': self.display_status(now),
            'priority': self.priority,
            'reminder_count': self.reminder_count,
            'last_reminder_sent': self.last_reminder_sent.isoformat() if self.last_reminder_sent else None,
            'escalated': self.escalated,
            'escalated_at': self.escalated_at.isoformat() if self.escalated_at else None,
            'is_overdue': self.is_overdue_at(now),
            'days_until_due': self.days_until_due(now),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }
