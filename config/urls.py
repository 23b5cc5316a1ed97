"""
URL configuration for deadline_chaser project.
"""

from django.conf import settings
from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path
from django.utils import timezone
from django.views.decorators.http import require_GET


@require_GET
def index(request):
    return JsonResponse({
        'success': True,
        'message': 'Deadline Chaser - Automated Reminder System',
        'version': '1.0.0',
        'endpoints': {
            'tasks': '/api/tasks/',
            'reminders': '/api/reminders/',
            'delivery': '/api/delivery/webhook/',
            'cron': '/api/cron/daily-check/',
            'analytics': '/api/analytics/',
            'health': '/health/',
        },
    })


@require_GET
def health(request):
    return JsonResponse({
        'success': True,
        'message': 'Deadline Chaser API is running',
        'timestamp': timezone.now().isoformat(),
    })


urlpatterns = [
    path('', index, name='index'),
    path('health/', health, name='health'),
    path('admin/', admin.site.urls),

    # App URLs
    path('api/tasks/', include('apps.tasks.urls', namespace='tasks')),
    path('api/reminders/', include('apps.reminders.urls', namespace='reminders')),
    path('api/analytics/', include('apps.reports.urls', namespace='reports')),
    path('api/', include('apps.notifications.urls', namespace='notifications')),
]

if settings.DEBUG and 'debug_toolbar' in settings.INSTALLED_APPS:
    import debug_toolbar
    urlpatterns = [
        path('__debug__/', include(debug_toolbar.urls)),
    ] + urlpatterns

# Admin site customization
admin.site.site_header = 'Deadline Chaser Administration'
admin.site.site_title = 'Deadline Chaser Admin'
admin.site.index_title = 'Tasks, reminders and escalations'
