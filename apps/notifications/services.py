"""
Service layer for notifications app.

Delivery channels used by the reminder engine. A channel takes a fully
rendered reminder and reports whether it went out:

- DeliveryChannel: routes a reminder to its email and/or chat transport
- WebhookDeliveryChannel: POSTs JSON to workflow webhooks (default)
- EmailDeliveryChannel: sends email through Django's mail framework

A transport with no webhook configured runs in demo mode and reports
success without sending anything.
"""

import json
import logging
import urllib.request
from dataclasses import dataclass
from email.utils import make_msgid
from typing import Optional

from django.conf import settings
from django.core.mail import EmailMessage
from django.core.serializers.json import DjangoJSONEncoder
from django.utils import timezone
from django.utils.module_loading import import_string

from apps.reminders.models import Reminder
from .content import format_due_date, render_subject
from .exceptions import DeliveryFailure

logger = logging.getLogger(__name__)


@dataclass
class DeliveryResult:
    success: bool
    tracking_id: Optional[str] = None
    error: Optional[str] = None
    mode: str = 'live'

    @classmethod
    def demo(cls):
        return cls(success=True, mode='demo')

    @classmethod
    def failed(cls, error):
        return cls(success=False, error=str(error))


def get_delivery_channel():
    """Instantiate the channel named by ``settings.REMINDER_DELIVERY_CHANNEL``."""
    return import_string(settings.REMINDER_DELIVERY_CHANNEL)()


class DeliveryChannel:
    """
    Base delivery channel.

    Subclasses implement the transports (``send_email``, ``send_chat``,
    ``escalate``). Transports raise DeliveryFailure on transport errors;
    ``send`` and ``send_escalation`` turn that into a failed result.
    """

    def send(self, task, reminder) -> DeliveryResult:
        transports = {
            Reminder.Channel.EMAIL: [self.send_email],
            Reminder.Channel.CHAT: [self.send_chat],
            Reminder.Channel.BOTH: [self.send_email, self.send_chat],
        }

        results = []
        for transport in transports.get(reminder.channel, [self.send_email]):
            try:
                result = transport(task, reminder)
            except DeliveryFailure as e:
                result = DeliveryResult.failed(e)
            if not result.success:
                return result
            results.append(result)

        tracking_id = next((r.tracking_id for r in results if r.tracking_id), None)
        return DeliveryResult(success=True, tracking_id=tracking_id, mode=results[0].mode)

    def send_escalation(self, task, reason) -> DeliveryResult:
        try:
            return self.escalate(task, reason)
        except DeliveryFailure as e:
            return DeliveryResult.failed(e)

    def send_email(self, task, reminder):
        raise NotImplementedError

    def send_chat(self, task, reminder):
        raise NotImplementedError

    def escalate(self, task, reason):
        raise NotImplementedError


class WebhookDeliveryChannel(DeliveryChannel):
    """Deliver through workflow webhooks that fan out to email and chat."""

    def __init__(self, email_url=None, chat_url=None, escalation_url=None, timeout=None):
        self.email_url = settings.REMINDER_EMAIL_WEBHOOK_URL if email_url is None else email_url
        self.chat_url = settings.REMINDER_CHAT_WEBHOOK_URL if chat_url is None else chat_url
        self.escalation_url = settings.ESCALATION_WEBHOOK_URL if escalation_url is None else escalation_url
        self.timeout = timeout or settings.DELIVERY_TIMEOUT_SECONDS

    def post(self, url, payload):
        """
        POST ``payload`` as JSON and return the result.

        The tracking id is read from a ``tracking_id`` or ``workflowId``
        key in the JSON response, when there is one.
        """
        data = json.dumps(payload, cls=DjangoJSONEncoder).encode()
        request = urllib.request.Request(
            url,
            data=data,
            method='POST',
            headers={'Content-Type': 'application/json'},
        )

        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as resp:
                body = resp.read()
        except OSError as e:
            # URLError, HTTPError and socket timeouts all land here
            raise DeliveryFailure(f'Webhook call to {url} failed: {e}') from e

        tracking_id = None
        try:
            response_data = json.loads(body) if body else {}
        except ValueError:
            response_data = {}
        if isinstance(response_data, dict):
            tracking_id = response_data.get('tracking_id') or response_data.get('workflowId')

        logger.info(f'Webhook delivered to {url} (tracking id: {tracking_id})')
        return DeliveryResult(success=True, tracking_id=tracking_id)

    def send_email(self, task, reminder):
        if not self.email_url:
            logger.warning('Email webhook URL not configured - running in demo mode')
            return DeliveryResult.demo()

        payload = {
            'to': task.assignee_email,
            'from': settings.DEFAULT_FROM_EMAIL,
            'subject': reminder.subject or f'Reminder: {task.title}',
            'message': reminder.message,
            'body': reminder.message,
            'task_id': str(task.pk),
            'reminder_id': str(reminder.pk),
            'task_title': task.title,
            'assignee_name': task.assignee_name,
            'assignee_email': task.assignee_email,
            'due_date': format_due_date(task.due_date),
            'priority': task.priority.upper(),
            'reminder_type': reminder.kind,
            'tone': reminder.tone,
            'status': task.status,
        }
        return self.post(self.email_url, payload)

    def send_chat(self, task, reminder):
        if not self.chat_url:
            logger.warning('Chat webhook URL not configured - running in demo mode')
            return DeliveryResult.demo()

        payload = {
            'chat_id': task.assignee_chat_id or None,
            'message': reminder.message,
            'task_id': str(task.pk),
            'reminder_id': str(reminder.pk),
            'task_title': task.title,
            'due_date': task.due_date,
        }
        return self.post(self.chat_url, payload)

    def escalate(self, task, reason):
        if not self.escalation_url:
            logger.warning('Escalation webhook URL not configured - running in demo mode')
            return DeliveryResult.demo()

        now = timezone.now()
        payload = {
            'task_id': str(task.pk),
            'task_title': task.title,
            'assignee': {
                'name': task.assignee_name,
                'email': task.assignee_email,
            },
            'due_date': task.due_date,
            'priority': task.priority,
            'escalation_reason': reason,
            'overdue_by': task.days_overdue(now),
            'reminder_count': task.reminder_count,
            'escalated_at': now,
            'escalation_email': settings.ESCALATION_EMAIL,
        }
        return self.post(self.escalation_url, payload)


class EmailDeliveryChannel(WebhookDeliveryChannel):
    """
    Send email reminders and escalations with Django's mail framework.

    Chat still goes through the chat webhook. The generated Message-ID is
    used as the tracking id.
    """

    def _send_mail(self, subject, body, to):
        domain = settings.DEFAULT_FROM_EMAIL.rsplit('@', 1)[-1]
        message_id = make_msgid(domain=domain)
        email = EmailMessage(
            subject=subject,
            body=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=to,
            headers={'Message-ID': message_id},
        )
        try:
            email.send()
        except OSError as e:
            raise DeliveryFailure(f'Failed to send email to {", ".join(to)}: {e}') from e
        return DeliveryResult(success=True, tracking_id=message_id)

    def send_email(self, task, reminder):
        return self._send_mail(
            subject=reminder.subject or f'Reminder: {task.title}',
            body=reminder.message,
            to=[task.assignee_email],
        )

    def escalate(self, task, reason):
        now = timezone.now()
        body = (
            f'Task "{task.title}" has been escalated.\n\n'
            f'Reason: {reason}\n'
            f'Assignee: {task.assignee_name} <{task.assignee_email}>\n'
            f'Priority: {task.get_priority_display()}\n'
            f'Due: {format_due_date(task.due_date)}\n'
            f'Overdue by: {task.days_overdue(now)} day(s)\n'
            f'Reminders sent: {task.reminder_count}\n'
        )
        return self._send_mail(
            subject=render_subject(task, Reminder.Kind.ESCALATION),
            body=body,
            to=[settings.ESCALATION_EMAIL],
        )
