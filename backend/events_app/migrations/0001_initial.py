import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Event',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('date_time', models.DateTimeField(blank=True, null=True)),
                ('venue', models.CharField(max_length=255)),
                ('capacity', models.PositiveIntegerField()),
                ('price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('image_url', models.URLField(blank=True, null=True)),
                ('external_link', models.URLField(blank=True, null=True)),
                ('community_id', models.UUIDField()),
                ('host_id', models.UUIDField(blank=True, null=True)),
                ('is_cancelled', models.BooleanField(default=False)),
                ('is_recurring_parent', models.BooleanField(default=False)),
                ('series_index', models.PositiveIntegerField(blank=True, null=True)),
                ('recurrence_pattern', models.CharField(blank=True, choices=[('daily', 'Daily'), ('weekly', 'Weekly'), ('monthly', 'Monthly'), ('custom', 'Custom (selected weekdays)')], max_length=10, null=True)),
                ('recurrence_frequency', models.PositiveIntegerField(default=1)),
                ('recurrence_days_of_week', models.JSONField(blank=True, help_text='Weekday indices, 0=Sunday .. 6=Saturday. Empty = weekday of the first event', null=True)),
                ('recurrence_day_of_month', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('recurrence_end_type', models.CharField(blank=True, choices=[('date', 'On a date'), ('count', 'After a number of events'), ('never', 'Never')], max_length=10, null=True)),
                ('recurrence_end_date', models.DateTimeField(blank=True, null=True)),
                ('recurrence_count', models.PositiveIntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('parent_event', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='children', to='events_app.event')),
            ],
            options={
                'ordering': ['date_time'],
                'indexes': [models.Index(fields=['parent_event'], name='idx_events_parent_event')],
            },
        ),
    ]
