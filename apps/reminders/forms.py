"""
Forms for reminders app.

- ManualReminderForm: operator-triggered reminder
- DeliveryCallbackForm: delivery confirmation from the delivery subsystem
- ResponseForm: assignee acknowledgment
"""

from django import forms

from .models import Reminder


class ManualReminderForm(forms.Form):
    task_id = forms.IntegerField(min_value=1)
    message = forms.CharField(required=False, strip=True)
    channel = forms.ChoiceField(choices=Reminder.Channel.choices, required=False)

    def clean_channel(self):
        return self.cleaned_data.get('channel') or Reminder.Channel.EMAIL


class DeliveryCallbackForm(forms.Form):
    reminder_id = forms.IntegerField(min_value=1)
    # Validated against the reminder state machine by the service layer
    status = forms.CharField(max_length=20)
    delivered_at = forms.DateTimeField(required=False)
    error = forms.CharField(required=False)


class ResponseForm(forms.Form):
    responded_at = forms.DateTimeField(required=False)
