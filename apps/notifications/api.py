"""
JSON helpers shared by the API views.

Every response carries ``success``; errors carry ``error`` (and ``errors``
for per-field validation messages).
"""

import functools
import json
import logging

from django.core.exceptions import ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.http import JsonResponse

from .exceptions import NotFound

logger = logging.getLogger(__name__)


class BadRequest(Exception):
    pass


def json_success(status=200, **data):
    return JsonResponse({'success': True, **data}, status=status, encoder=DjangoJSONEncoder)


def json_error(error, status=400, **data):
    return JsonResponse({'success': False, 'error': error, **data}, status=status)


def parse_json_body(request):
    """Decode a JSON object request body; an empty body is an empty dict."""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except ValueError:
        raise BadRequest('Request body is not valid JSON')
    if not isinstance(data, dict):
        raise BadRequest('Request body must be a JSON object')
    return data


def validation_message(error):
    if hasattr(error, 'message_dict'):
        return '; '.join(
            f'{field}: {" ".join(messages)}' for field, messages in error.message_dict.items()
        )
    return ' '.join(error.messages)


def api_view(view_func):
    """
    Map service-layer exceptions to JSON error responses:
    BadRequest / ValidationError → 400, NotFound → 404.
    """
    @functools.wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except BadRequest as e:
            return json_error(str(e), status=400)
        except ValidationError as e:
            return json_error(validation_message(e), status=400)
        except NotFound as e:
            return json_error(str(e), status=404)
    return wrapper


def form_error_response(form):
    errors = {field: [str(m) for m in messages] for field, messages in form.errors.items()}
    summary = '; '.join(f'{field}: {" ".join(messages)}' for field, messages in errors.items())
    return json_error(summary, status=400, errors=errors)
