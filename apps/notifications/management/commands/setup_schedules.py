"""
Management command to set up Django-Q2 schedules for reminder jobs.

This command creates/updates the scheduled task that runs the daily
reminder evaluation cycle. The cron expression comes from
settings.REMINDER_CHECK_CRON.

Usage:
    python manage.py setup_schedules

The command is idempotent - safe to run multiple times.
"""
from django.conf import settings
from django.core.management.base import BaseCommand
from django_q.models import Schedule


DAILY_REMINDER_CHECK = 'Daily Reminder Check'


class Command(BaseCommand):
    help = 'Set up Django-Q2 schedules for reminder jobs'

    def handle(self, *args, **options):
        self.stdout.write('\nSetting up Django-Q2 schedules...\n')

        cron = settings.REMINDER_CHECK_CRON
        _, created = Schedule.objects.update_or_create(
            name=DAILY_REMINDER_CHECK,
            defaults={
                'func': 'apps.notifications.tasks.run_daily_reminder_check',
                'schedule_type': Schedule.CRON,
                'cron': cron,
                'repeats': -1,  # Run forever
            }
        )

        if created:
            self.stdout.write(
                self.style.SUCCESS(f'✓ Created schedule: {DAILY_REMINDER_CHECK} (cron "{cron}")')
            )
        else:
            self.stdout.write(
                self.style.WARNING(f'↻ Updated schedule: {DAILY_REMINDER_CHECK} (cron "{cron}")')
            )

        self.stdout.write('')
        self.stdout.write(
            self.style.NOTICE(
                'Note: Ensure Django-Q cluster is running: python manage.py qcluster'
            )
        )
        self.stdout.write('')
