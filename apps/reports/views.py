"""
Views for reports app.

Analytics endpoints:
- Dashboard aggregates
- Response timing patterns
"""

from django.views.decorators.http import require_GET

from apps.notifications.api import api_view, json_success
from .services import get_dashboard_stats, get_response_patterns


@require_GET
@api_view
def dashboard(request):
    return json_success(dashboard=get_dashboard_stats())


@require_GET
@api_view
def response_patterns(request):
    return json_success(patterns=get_response_patterns())
