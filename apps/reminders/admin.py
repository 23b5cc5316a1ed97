"""
Admin configuration for reminders app.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import Reminder


@admin.register(Reminder)
class ReminderAdmin(admin.ModelAdmin):
    """Admin for Reminder model. Every field is read-only."""

    list_display = (
        'task', 'kind', 'status_display', 'channel', 'tone',
        'sent_at', 'response_received',
    )
    list_filter = ('kind', 'status', 'tone', 'channel', 'response_received', 'sent_at')
    search_fields = ('task__title', 'task__assignee_email', 'subject', 'tracking_id')
    ordering = ('-sent_at',)
    date_hierarchy = 'sent_at'
    list_select_related = ('task',)

    # Status moves only through delivery callbacks and acknowledgments
    readonly_fields = (
        'task', 'kind', 'channel', 'tone', 'status', 'subject', 'message', 'ai_generated',
        'sent_at', 'sent_on', 'tracking_id', 'error_message', 'delivered_at',
        'response_received', 'responded_at', 'created_at', 'updated_at',
    )

    fieldsets = (
        (None, {
            'fields': ('task', 'kind', 'channel', 'tone', 'status')
        }),
        ('Content', {
            'fields': ('subject', 'message', 'ai_generated')
        }),
        ('Delivery', {
            'fields': ('sent_at', 'sent_on', 'tracking_id', 'error_message', 'delivered_at')
        }),
        ('Response', {
            'fields': ('response_received', 'responded_at'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {
            'pending': '#FFA500',
            'sent': '#3498db',
            'delivered': '#27ae60',
            'failed': '#e74c3c',
        }
        color = colors.get(obj.status, '#000')
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, obj.get_status_display()
        )
    status_display.short_description = 'Status'
    status_display.admin_order_field = 'status'
