"""
Views for notifications app.

- Delivery confirmation webhook (called by the delivery subsystem)
- "Run the daily check now" trigger
"""

import logging

from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from apps.reminders.forms import DeliveryCallbackForm
from .api import api_view, form_error_response, json_error, json_success, parse_json_body
from .exceptions import CycleAlreadyRunning
from .scheduler import process_delivery_callback, run_evaluation_cycle

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
@api_view
def delivery_webhook(request):
    data = parse_json_body(request)
    logger.info(f'Delivery callback received for reminder {data.get("reminder_id")}')

    form = DeliveryCallbackForm(data)
    if not form.is_valid():
        return form_error_response(form)

    reminder = process_delivery_callback(
        form.cleaned_data['reminder_id'],
        form.cleaned_data['status'],
        delivered_at=form.cleaned_data['delivered_at'],
        error_message=form.cleaned_data['error'] or None,
    )
    return json_success(message='Webhook processed successfully', reminder=reminder.to_dict())


@csrf_exempt
@require_POST
@api_view
def daily_check(request):
    try:
        result = run_evaluation_cycle()
    except CycleAlreadyRunning as e:
        return json_error(str(e), status=409)

    return json_success(message='Daily check completed', **result.to_dict())
