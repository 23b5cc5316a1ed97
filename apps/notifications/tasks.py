"""
Scheduled tasks for notifications app.

Background jobs run by the Django-Q2 cluster:
- Daily reminder check (settings.REMINDER_CHECK_CRON, 9:00 AM by default)

Schedules are registered with ``python manage.py setup_schedules``.
"""

import logging

from .exceptions import CycleAlreadyRunning
from .scheduler import run_evaluation_cycle

logger = logging.getLogger(__name__)


def run_daily_reminder_check():
    """
    Scheduled job: one reminder evaluation cycle over all open tasks.

    Returns a JSON-friendly summary, which Django-Q stores as the task result.
    A run that finds another cycle in progress is skipped, not failed.
    """
    try:
        result = run_evaluation_cycle()
    except CycleAlreadyRunning:
        logger.warning('Daily reminder check skipped: a cycle is already running')
        return {'skipped': True, 'reason': 'cycle already running'}

    return result.to_dict()
