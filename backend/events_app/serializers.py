from rest_framework import serializers

from .models import Event
from .services.recurrence import (
    InvalidRecurrenceConfig,
    RecurrenceConfig,
    RecurrenceEndType,
    RecurrencePattern,
)


class EventSerializer(serializers.ModelSerializer):
    """Serializer for Event model with validation"""

    class Meta:
        model = Event
        fields = '__all__'
        read_only_fields = [
            'is_recurring_parent', 'parent_event', 'series_index',
            'recurrence_pattern', 'recurrence_frequency', 'recurrence_days_of_week',
            'recurrence_day_of_month', 'recurrence_end_type', 'recurrence_end_date',
            'recurrence_count', 'created_at',
        ]

    def validate_capacity(self, value):
        """Ensure capacity is positive"""
        if value <= 0:
            raise serializers.ValidationError("Capacity must be positive")
        return value

    def validate_price(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("Price must not be negative")
        return value


class RecurrenceConfigSerializer(serializers.Serializer):
    """
    Validates recurrence input collected from the event form and turns it
    into a RecurrenceConfig.
    """

    start_date = serializers.DateTimeField()
    pattern = serializers.ChoiceField(choices=[p.value for p in RecurrencePattern])
    frequency = serializers.IntegerField(min_value=1, default=1)
    days_of_week = serializers.ListField(
        child=serializers.IntegerField(min_value=0, max_value=6),
        required=False,
        allow_empty=True,
    )
    day_of_month = serializers.IntegerField(min_value=1, max_value=31, required=False, allow_null=True)
    end_type = serializers.ChoiceField(
        choices=[e.value for e in RecurrenceEndType],
        default=RecurrenceEndType.NEVER.value,
    )
    end_date = serializers.DateTimeField(required=False, allow_null=True)
    count = serializers.IntegerField(min_value=1, required=False, allow_null=True)

    def validate(self, data):
        """Cross-field validation"""
        end_type = data.get('end_type')

        if end_type == RecurrenceEndType.DATE.value and not data.get('end_date'):
            raise serializers.ValidationError({'end_date': "End date is required when the series ends on a date"})

        if end_type == RecurrenceEndType.COUNT.value and not data.get('count'):
            raise serializers.ValidationError({'count': "Count is required when the series ends after a count"})

        # Only keep the fields that apply to the chosen end type
        if end_type != RecurrenceEndType.DATE.value:
            data['end_date'] = None
        if end_type != RecurrenceEndType.COUNT.value:
            data['count'] = None

        try:
            data['config'] = self._build_config(data)
        except InvalidRecurrenceConfig as exc:
            raise serializers.ValidationError(str(exc))
        return data

    def _build_config(self, data) -> RecurrenceConfig:
        return RecurrenceConfig(
            start_date=data['start_date'],
            pattern=data['pattern'],
            frequency=data.get('frequency', 1),
            days_of_week=tuple(data.get('days_of_week') or ()) or None,
            day_of_month=data.get('day_of_month'),
            end_type=data['end_type'],
            end_date=data.get('end_date'),
            count=data.get('count'),
        )

    def to_config(self) -> RecurrenceConfig:
        """RecurrenceConfig for validated data; call is_valid() first"""
        return self.validated_data['config']
