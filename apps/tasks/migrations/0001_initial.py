from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Task',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('assignee_name', models.CharField(max_length=150)),
                ('assignee_email', models.EmailField(db_index=True, max_length=254)),
                ('assignee_chat_id', models.CharField(blank=True, help_text='Chat handle used by the chat delivery channel', max_length=100)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('in-progress', 'In Progress'), ('completed', 'Completed')], db_index=True, default='pending', max_length=15)),
                ('priority', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High'), ('urgent', 'Urgent')], db_index=True, default='medium', max_length=10)),
                ('due_date', models.DateTimeField(db_index=True)),
                ('reminder_count', models.PositiveIntegerField(default=0)),
                ('last_reminder_sent', models.DateTimeField(blank=True, null=True)),
                ('escalated', models.BooleanField(db_index=True, default=False)),
                ('escalated_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'verbose_name': 'task',
                'verbose_name_plural': 'tasks',
                'ordering': ['due_date'],
                'indexes': [
                    models.Index(fields=['status', 'due_date'], name='tasks_task_status_1c2f0b_idx'),
                    models.Index(fields=['priority', 'status'], name='tasks_task_priorit_6e9d4a_idx'),
                ],
            },
        ),
    ]
