"""
Task filters using django-filter.

Provides filtering for the task list endpoint:
- Status filter (includes the derived "overdue" label)
- Priority filter (multi-value)
- Assignee email (case-insensitive exact match)
- Escalated flag
- Search (title, description, assignee name)
"""

import django_filters
from django.db.models import Q

from .models import Task


STATUS_FILTER_CHOICES = list(Task.Status.choices) + [(Task.OVERDUE_LABEL, 'Overdue')]


class TaskFilter(django_filters.FilterSet):
    """
    Task filter for the list API.

    Usage in views:
        filterset = TaskFilter(request.GET, queryset=queryset)
        tasks = filterset.qs
    """

    search = django_filters.CharFilter(method='filter_search', label='Search')

    status = django_filters.ChoiceFilter(
        choices=STATUS_FILTER_CHOICES,
        method='filter_status',
        label='Status',
    )

    priority = django_filters.MultipleChoiceFilter(
        choices=Task.Priority.choices,
        label='Priority',
    )

    assignee = django_filters.CharFilter(
        field_name='assignee_email',
        lookup_expr='iexact',
        label='Assignee email',
    )

    escalated = django_filters.BooleanFilter(label='Escalated')

    class Meta:
        model = Task
        fields = ['status', 'priority', 'assignee', 'escalated']

    def filter_search(self, queryset, name, value):
        """Case-insensitive partial match on title, description and assignee name."""
        if not value:
            return queryset

        return queryset.filter(
            Q(title__icontains=value) |
            Q(description__icontains=value) |
            Q(assignee_name__icontains=value)
        )

    def filter_status(self, queryset, name, value):
        """``overdue`` is derived: open tasks whose due date has passed."""
        if not value:
            return queryset
        if value == Task.OVERDUE_LABEL:
            return queryset.overdue()
        return queryset.filter(status=value)
