"""
Run one reminder evaluation cycle from the command line.

Usage:
    python manage.py run_reminder_cycle
    python manage.py run_reminder_cycle --verbose
"""
from django.core.management.base import BaseCommand, CommandError

from apps.notifications.exceptions import CycleAlreadyRunning
from apps.notifications.scheduler import run_evaluation_cycle


class Command(BaseCommand):
    help = 'Evaluate all open tasks and send due reminders and escalations'

    def add_arguments(self, parser):
        parser.add_argument(
            '--verbose',
            action='store_true',
            help='Print the outcome for every evaluated task',
        )

    def handle(self, *args, **options):
        try:
            result = run_evaluation_cycle()
        except CycleAlreadyRunning as e:
            raise CommandError(str(e))

        if options['verbose']:
            for outcome in result.results:
                if outcome.error or outcome.escalation_error:
                    line = f'  ✗ Task {outcome.task_id}: {outcome.error or outcome.escalation_error}'
                    self.stdout.write(self.style.ERROR(line))
                elif outcome.sent or outcome.escalated:
                    line = f'  ✓ Task {outcome.task_id}: {outcome.kind or "-"}'
                    if outcome.escalated:
                        line += f' (escalated: {outcome.escalation_reason})'
                    self.stdout.write(self.style.SUCCESS(line))

        summary = (
            f'Evaluated {len(result.results)} task(s): '
            f'{result.reminders_sent} reminder(s) sent, '
            f'{result.escalations} escalation(s), '
            f'{len(result.failures)} failure(s).'
        )
        if result.failures:
            self.stdout.write(self.style.WARNING(summary))
        else:
            self.stdout.write(self.style.SUCCESS(summary))
