"""
Views for reminders app.

JSON API:
- Reminder list (newest first, capped) and per-task history
- Manual reminder
- Acknowledgment
- Reminder stats
"""

from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from apps.notifications.api import api_view, form_error_response, json_success, parse_json_body
from apps.notifications.scheduler import record_response, send_manual_reminder
from apps.reports.services import get_reminder_stats
from apps.tasks.services import get_task
from .filters import ReminderFilter
from .forms import ManualReminderForm, ResponseForm
from .models import Reminder

MAX_REMINDERS = 100


def _reminder_payload(reminder):
    data = reminder.to_dict()
    data['task'] = {
        'id': reminder.task_id,
        'title': reminder.task.title,
        'assignee_name': reminder.task.assignee_name,
        'due_date': reminder.task.due_date.isoformat(),
    }
    return data


@require_GET
@api_view
def reminder_list(request):
    reminder_filter = ReminderFilter(
        request.GET,
        queryset=Reminder.objects.select_related('task'),
    )
    if not reminder_filter.is_valid():
        return form_error_response(reminder_filter.form)

    reminders = reminder_filter.qs.order_by('-sent_at', '-pk')[:MAX_REMINDERS]
    payload = [_reminder_payload(r) for r in reminders]
    return json_success(count=len(payload), reminders=payload)


@require_GET
@api_view
def task_reminders(request, task_id):
    task = get_task(task_id)
    reminders = task.reminders.order_by('-sent_at', '-pk')
    payload = [r.to_dict() for r in reminders]
    return json_success(count=len(payload), reminders=payload)


@csrf_exempt
@require_POST
@api_view
def manual_reminder(request):
    form = ManualReminderForm(parse_json_body(request))
    if not form.is_valid():
        return form_error_response(form)

    reminder = send_manual_reminder(
        form.cleaned_data['task_id'],
        message=form.cleaned_data['message'] or None,
        channel=form.cleaned_data['channel'],
    )
    return json_success(
        status=201,
        delivered=reminder.status == Reminder.Status.SENT,
        reminder=reminder.to_dict(),
    )


@csrf_exempt
@require_POST
@api_view
def reminder_response(request, pk):
    form = ResponseForm(parse_json_body(request))
    if not form.is_valid():
        return form_error_response(form)

    reminder = record_response(pk, responded_at=form.cleaned_data['responded_at'])
    return json_success(reminder=reminder.to_dict())


@require_GET
@api_view
def reminder_stats(request):
    return json_success(stats=get_reminder_stats())
