"""
Reminder models.

Models:
- Reminder: One rendered notice sent (or attempted) for a task

Status workflow:
- pending → sent | failed
- sent → delivered (delivery confirmation callback)
- sent → failed (late failure reported by the delivery callback)
- failed and delivered are terminal; a retry is a brand-new record
"""

from django.db import models
from django.db.models import Q
from django.utils import timezone


class ReminderQuerySet(models.QuerySet):

    def for_task(self, task):
        return self.filter(task=task)

    def sent_on_day(self, task, kind, day):
        """Reminders of ``kind`` for ``task`` whose send date is ``day``."""
        return self.filter(task=task, kind=kind, sent_on=day)


class Reminder(models.Model):
    """
    A reminder or escalation notice for a task.

    ``message`` and ``subject`` are rendered once at creation and never
    edited afterwards.
    """

    class Kind(models.TextChoices):
        AUTO_3DAYS = 'auto-3days', '3 Days Before'
        AUTO_1DAY = 'auto-1day', '1 Day Before'
        AUTO_DEADLINE = 'auto-deadline', 'Due Today'
        AUTO_OVERDUE = 'auto-overdue', 'Overdue'
        MANUAL = 'manual', 'Manual'
        ESCALATION = 'escalation', 'Escalation'

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        SENT = 'sent', 'Sent'
        FAILED = 'failed', 'Failed'
        DELIVERED = 'delivered', 'Delivered'

    class Channel(models.TextChoices):
        EMAIL = 'email', 'Email'
        CHAT = 'chat', 'Chat'
        BOTH = 'both', 'Email & Chat'

    class Tone(models.TextChoices):
        FORMAL = 'formal', 'Formal'
        FRIENDLY = 'friendly', 'Friendly'
        CASUAL = 'casual', 'Casual'
        URGENT = 'urgent', 'Urgent'

    # Kinds produced by the evaluation cycle; at most one per task per day
    AUTO_KINDS = [
        Kind.AUTO_3DAYS,
        Kind.AUTO_1DAY,
        Kind.AUTO_DEADLINE,
        Kind.AUTO_OVERDUE,
    ]

    STATUS_TRANSITIONS = {
        Status.PENDING: [Status.SENT, Status.FAILED],
        Status.SENT: [Status.DELIVERED, Status.FAILED],
        Status.FAILED: [],
        Status.DELIVERED: [],
    }

    task = models.ForeignKey(
        'tasks.Task',
        on_delete=models.CASCADE,
        related_name='reminders',
    )
    sent_at = models.DateTimeField(default=timezone.now, db_index=True)
    sent_on = models.DateField(
        editable=False,
        help_text='Local calendar day of sent_at, used for duplicate suppression'
    )
    kind = models.CharField(max_length=20, choices=Kind.choices, db_index=True)
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    channel = models.CharField(
        max_length=10,
        choices=Channel.choices,
        default=Channel.EMAIL,
    )
    tone = models.CharField(
        max_length=10,
        choices=Tone.choices,
        default=Tone.FORMAL,
    )
    subject = models.CharField(max_length=255, blank=True)
    message = models.TextField()
    ai_generated = models.BooleanField(
        default=False,
        help_text='Content produced by the template engine rather than typed by a person'
    )

    # Delivery tracking
    tracking_id = models.CharField(max_length=255, null=True, blank=True)
    error_message = models.TextField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)

    # Acknowledgment from the assignee
    response_received = models.BooleanField(default=False)
    responded_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ReminderQuerySet.as_manager()

    class Meta:
        verbose_name = 'reminder'
        verbose_name_plural = 'reminders'
        ordering = ['-sent_at']
        indexes = [
            models.Index(fields=['task', '-sent_at'], name='reminders_r_task_id_3b8e1f_idx'),
            models.Index(fields=['status'], name='reminders_r_status_9a4c2d_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['task', 'kind', 'sent_on'],
                condition=Q(kind__in=[
                    'auto-3days', 'auto-1day', 'auto-deadline', 'auto-overdue',
                ]),
                name='unique_auto_reminder_per_task_per_day',
            ),
        ]

    def __str__(self):
        return f"{self.get_kind_display()} reminder for task #{self.task_id} ({self.status})"

    def save(self, *args, **kwargs):
        if not self.sent_on:
            self.sent_on = timezone.localdate(self.sent_at)
        super().save(*args, **kwargs)

    def can_transition_to(self, new_status):
        return new_status in self.STATUS_TRANSITIONS.get(self.status, [])

    def to_dict(self):
        return {
            'id': self.pk,
            'task_id': self.task_id,
            'sent_at': self.sent_at.isoformat(),
            'kind': self.kind,
            'status': self.status,
            'channel': self.channel,
            'tone': self.tone,
            'subject': self.subject,
            'message': self.message,
            'ai_generated': self.ai_generated,
            'tracking_id': self.tracking_id,
            'error_message': self.error_message,
            'delivered_at': self.delivered_at.isoformat() if self.delivered_at else None,
            'response_received': self.response_received,
            'responded_at': self.responded_at.isoformat() if self.responded_at else None,
        }
