import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tasks', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Reminder',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sent_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('sent_on', models.DateField(editable=False, help_text='Local calendar day of sent_at, used for duplicate suppression')),
                ('kind', models.CharField(choices=[('auto-3days', '3 Days Before'), ('auto-1day', '1 Day Before'), ('auto-deadline', 'Due Today'), ('auto-overdue', 'Overdue'), ('manual', 'Manual'), ('escalation', 'Escalation')], db_index=True, max_length=20)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('sent', 'Sent'), ('failed', 'Failed'), ('delivered', 'Delivered')], db_index=True, default='pending', max_length=10)),
                ('channel', models.CharField(choices=[('email', 'Email'), ('chat', 'Chat'), ('both', 'Email & Chat')], default='email', max_length=10)),
                ('tone', models.CharField(choices=[('formal', 'Formal'), ('friendly', 'Friendly'), ('casual', 'Casual'), ('urgent', 'Urgent')], default='formal', max_length=10)),
                ('subject', models.CharField(blank=True, max_length=255)),
                ('message', models.TextField()),
                ('ai_generated', models.BooleanField(default=False, help_text='Content produced by the template engine rather than typed by a person')),
                ('tracking_id', models.CharField(blank=True, max_length=255, null=True)),
                ('error_message', models.TextField(blank=True, null=True)),
                ('delivered_at', models.DateTimeField(blank=True, null=True)),
                ('response_received', models.BooleanField(default=False)),
                ('responded_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('task', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reminders', to='tasks.task')),
            ],
            options={
                'verbose_name': 'reminder',
                'verbose_name_plural': 'reminders',
                'ordering': ['-sent_at'],
                'indexes': [
                    models.Index(fields=['task', '-sent_at'], name='reminders_r_task_id_3b8e1f_idx'),
                    models.Index(fields=['status'], name='reminders_r_status_9a4c2d_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(
                        condition=models.Q(('kind__in', ['auto-3days', 'auto-1day', 'auto-deadline', 'auto-overdue'])),
                        fields=('task', 'kind', 'sent_on'),
                        name='unique_auto_reminder_per_task_per_day',
                    ),
                ],
            },
        ),
    ]
