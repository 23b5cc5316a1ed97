"""
Reminder filters using django-filter.

Filters for the reminder list endpoint: task, status, kind, channel.
"""

import django_filters

from .models import Reminder


class ReminderFilter(django_filters.FilterSet):

    task = django_filters.NumberFilter(field_name='task_id', label='Task')

    status = django_filters.ChoiceFilter(choices=Reminder.Status.choices, label='Status')

    kind = django_filters.ChoiceFilter(choices=Reminder.Kind.choices, label='Kind')

    channel = django_filters.ChoiceFilter(choices=Reminder.Channel.choices, label='Channel')

    class Meta:
        model = Reminder
        fields = ['task', 'status', 'kind', 'channel']
