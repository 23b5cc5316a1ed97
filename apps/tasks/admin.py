"""
Admin configuration for tasks app.
"""

from django import forms
from django.contrib import admin
from django.utils import timezone
from django.utils.html import format_html

from apps.reminders.models import Reminder
from .models import Task
from .services import update_task


class TaskAdminForm(forms.ModelForm):
    """Admin edits follow the same status workflow as the API."""

    class Meta:
        model = Task
        fields = (
            'title', 'description', 'assignee_name', 'assignee_email',
            'assignee_chat_id', 'status', 'priority', 'due_date',
        )

    def clean_status(self):
        status = self.cleaned_data['status']
        task = self.instance
        if task.pk and status != task.status and not task.can_transition_to(status):
            raise forms.ValidationError(
                f"Cannot change status from '{task.get_status_display()}' to "
                f"'{Task.Status(status).label}'."
            )
        return status


class ReminderInline(admin.TabularInline):
    """Inline admin for reminders on task detail."""
    model = Reminder
    extra = 0
    fields = ('sent_at', 'kind', 'channel', 'tone', 'status', 'response_received')
    readonly_fields = fields
    can_delete = False
    ordering = ('-sent_at',)

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    """Admin for Task model."""

    form = TaskAdminForm

    list_display = (
        'title', 'assignee_name', 'assignee_email', 'status_display',
        'priority_display', 'due_date', 'reminder_count', 'escalated',
        'is_overdue_display',
    )
    list_filter = ('status', 'priority', 'escalated', 'due_date')
    search_fields = ('title', 'description', 'assignee_name', 'assignee_email')
    ordering = ('due_date',)
    date_hierarchy = 'due_date'

    readonly_fields = (
        'reminder_count', 'last_reminder_sent', 'escalated', 'escalated_at',
        'created_at', 'updated_at', 'completed_at',
    )

    fieldsets = (
        (None, {
            'fields': ('title', 'description')
        }),
        ('Assignee', {
            'fields': ('assignee_name', 'assignee_email', 'assignee_chat_id')
        }),
        ('Status & Priority', {
            'fields': ('status', 'priority', 'due_date')
        }),
        ('Reminders & Escalation', {
            'fields': ('reminder_count', 'last_reminder_sent', 'escalated', 'escalated_at'),
            'classes': ('collapse',),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at', 'completed_at'),
            'classes': ('collapse',),
        }),
    )

    inlines = [ReminderInline]

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {
            'pending': '#FFA500',      # Orange
            'in-progress': '#3498db',  # Blue
            'completed': '#27ae60',    # Green
        }
        color = colors.get(obj.status, '#000')
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, obj.get_status_display()
        )
    status_display.short_description = 'Status'
    status_display.admin_order_field = 'status'

    def priority_display(self, obj):
        """Display priority with color coding."""
        colors = {
            'low': '#95a5a6',
            'medium': '#3498db',
            'high': '#e67e22',
            'urgent': '#e74c3c',
        }
        color = colors.get(obj.priority, '#000')
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, obj.get_priority_display()
        )
    priority_display.short_description = 'Priority'
    priority_display.admin_order_field = 'priority'

    def is_overdue_display(self, obj):
        if obj.is_overdue:
            return format_html('<span style="color: red;">⚠️ OVERDUE</span>')
        return ''
    is_overdue_display.short_description = 'Overdue'

    def save_model(self, request, obj, form, change):
        """Edits go through update_task so engine-owned fields are never written back."""
        if not change:
            if obj.status == Task.Status.COMPLETED:
                obj.completed_at = timezone.now()
            super().save_model(request, obj, form, change)
            return
        changes = {name: form.cleaned_data[name] for name in form.changed_data}
        update_task(Task.objects.get(pk=obj.pk), **changes)
