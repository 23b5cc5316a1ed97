"""
Views for tasks app.

JSON API:
- Task list with filtering and pagination / task creation
- Task detail (with reminders), update and delete
"""

from django.core.paginator import EmptyPage, PageNotAnInteger, Paginator
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from apps.notifications.api import api_view, form_error_response, json_error, json_success, parse_json_body
from apps.reports.services import suggest_send_hour
from .filters import TaskFilter
from .forms import TaskForm, TaskUpdateForm, flatten_assignee
from .models import Task
from .services import create_task, delete_task, get_task, update_task

TASKS_PER_PAGE = 50


# =============================================================================
# Task Collection
# =============================================================================

@csrf_exempt
@require_http_methods(["GET", "POST"])
@api_view
def task_list(request):
    """GET: filtered, paginated task list. POST: create a task."""
    if request.method == 'POST':
        return _task_create(request)

    task_filter = TaskFilter(request.GET, queryset=Task.objects.all())
    if not task_filter.is_valid():
        return form_error_response(task_filter.form)

    queryset = task_filter.qs.order_by('due_date', 'pk')

    paginator = Paginator(queryset, TASKS_PER_PAGE)
    page = request.GET.get('page', 1)

    try:
        tasks = paginator.page(page)
    except PageNotAnInteger:
        tasks = paginator.page(1)
    except EmptyPage:
        tasks = paginator.page(paginator.num_pages)

    now = timezone.now()
    return json_success(
        count=paginator.count,
        page=tasks.number,
        num_pages=paginator.num_pages,
        tasks=[task.to_dict(now) for task in tasks],
    )


def _task_create(request):
    data = flatten_assignee(parse_json_body(request))
    form = TaskForm(data)
    if not form.is_valid():
        return form_error_response(form)

    task = create_task(**form.cleaned_data)
    return json_success(status=201, task=task.to_dict())


# =============================================================================
# Single Task
# =============================================================================

@csrf_exempt
@require_http_methods(["GET", "PUT", "PATCH", "DELETE"])
@api_view
def task_detail(request, pk):
    """Task detail with its reminders, newest first."""
    task = get_task(pk)

    if request.method in ('PUT', 'PATCH'):
        return _task_update(request, task)

    if request.method == 'DELETE':
        delete_task(task)
        return json_success(message='Task and associated reminders deleted')

    reminders = task.reminders.order_by('-sent_at', '-pk')
    return json_success(
        task=task.to_dict(),
        reminders=[reminder.to_dict() for reminder in reminders],
        suggested_send_hour=suggest_send_hour(task),
    )


def _task_update(request, task):
    data = flatten_assignee(parse_json_body(request))
    if not data:
        return json_error('No fields to update', status=400)

    unknown = sorted(set(data) - set(TaskUpdateForm.base_fields))
    if unknown:
        return json_error(f'Fields cannot be updated: {", ".join(unknown)}', status=400)

    form = TaskUpdateForm(data)
    if not form.is_valid():
        return form_error_response(form)

    task = update_task(task, **form.changes())
    return json_success(task=task.to_dict())
