import uuid

from django.core.exceptions import ValidationError
from django.db import models


# Choices defined at module level so they can be shared
RECURRENCE_PATTERN_CHOICES = [
    ('daily', 'Daily'),
    ('weekly', 'Weekly'),
    ('monthly', 'Monthly'),
    ('custom', 'Custom (selected weekdays)'),
]

RECURRENCE_END_TYPE_CHOICES = [
    ('date', 'On a date'),
    ('count', 'After a number of events'),
    ('never', 'Never'),
]


class Event(models.Model):
    """
    A community event.

    A recurring series is stored as one parent event (is_recurring_parent=True,
    series_index=1) holding the recurrence configuration, plus independent
    child events pointing back at it through parent_event.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    date_time = models.DateTimeField(null=True, blank=True)
    venue = models.CharField(max_length=255)
    capacity = models.PositiveIntegerField()
    price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    image_url = models.URLField(null=True, blank=True)
    external_link = models.URLField(null=True, blank=True)
    community_id = models.UUIDField()
    host_id = models.UUIDField(null=True, blank=True)
    is_cancelled = models.BooleanField(default=False)

    # Series linkage
    is_recurring_parent = models.BooleanField(default=False)
    parent_event = models.ForeignKey(
        'self',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='children',
    )
    series_index = models.PositiveIntegerField(null=True, blank=True)

    # Recurrence configuration, only populated on parent events
    recurrence_pattern = models.CharField(max_length=10, choices=RECURRENCE_PATTERN_CHOICES, null=True, blank=True)
    recurrence_frequency = models.PositiveIntegerField(default=1)
    recurrence_days_of_week = models.JSONField(
        null=True,
        blank=True,
        help_text="Weekday indices, 0=Sunday .. 6=Saturday. Empty = weekday of the first event",
    )
    recurrence_day_of_month = models.PositiveSmallIntegerField(null=True, blank=True)
    recurrence_end_type = models.CharField(max_length=10, choices=RECURRENCE_END_TYPE_CHOICES, null=True, blank=True)
    recurrence_end_date = models.DateTimeField(null=True, blank=True)
    recurrence_count = models.PositiveIntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['date_time']
        indexes = [
            models.Index(fields=['parent_event'], name='idx_events_parent_event'),
        ]

    def __str__(self):
        if self.series_index:
            return f"{self.title} (#{self.series_index})"
        return self.title

    @property
    def series_parent_id(self):
        """Primary key of the series parent, or None for standalone events"""
        if self.parent_event_id:
            return self.parent_event_id
        if self.is_recurring_parent:
            return self.pk
        return None

    @property
    def is_part_of_series(self) -> bool:
        return self.series_parent_id is not None

    def clean(self):
        """Validate model constraints"""
        if self.capacity is not None and self.capacity <= 0:
            raise ValidationError("Capacity must be positive")

        if self.price is not None and self.price < 0:
            raise ValidationError("Price must not be negative")

        if self.is_recurring_parent and not self.recurrence_pattern:
            raise ValidationError("Recurring parent events need a recurrence pattern")

        if self.is_recurring_parent and self.parent_event_id:
            raise ValidationError("A recurring parent cannot itself belong to another series")

        if self.recurrence_frequency < 1:
            raise ValidationError("Recurrence frequency must be at least 1")

        if self.recurrence_day_of_month is not None and not 1 <= self.recurrence_day_of_month <= 31:
            raise ValidationError("Recurrence day of month must be between 1 and 31")

        if self.recurrence_days_of_week and any(
            day not in range(7) for day in self.recurrence_days_of_week
        ):
            raise ValidationError("Recurrence days of week must be between 0 (Sunday) and 6 (Saturday)")
