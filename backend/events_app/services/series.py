"""
Service for storing recurring event series.
Persists a parent event with its generated children and keeps shared
fields in sync across the members of a series.
"""

import logging
from typing import Any, Dict, List, Tuple

from django.db import transaction
from django.db.models import Q, QuerySet

from ..models import Event
from .recurrence import (
    RecurrenceConfig,
    RecurrenceEndType,
    RecurrencePattern,
    build_child_events,
    generate_recurrence_dates,
)


logger = logging.getLogger(__name__)

# Fields copied from the parent to every child, and propagated on "apply to all"
SHARED_FIELDS = [
    'title', 'description', 'venue', 'capacity', 'price',
    'image_url', 'external_link', 'community_id', 'host_id',
]


class SeriesError(Exception):
    """Base class for series storage errors"""


class NoInstancesGenerated(SeriesError):
    """The recurrence configuration did not produce any event dates"""


class EventCancelled(SeriesError):
    """Cancelled events cannot be edited"""


def shared_fields_of(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {name: fields[name] for name in SHARED_FIELDS if name in fields}


def create_recurring_event(fields: Dict[str, Any], config: RecurrenceConfig) -> Tuple[Event, List[Event]]:
    """
    Create a recurring series: the first date becomes the parent event,
    every further date a child event.

    Args:
        fields: Event fields shared by the whole series
        config: RecurrenceConfig to expand

    Returns:
        (parent, children) tuple

    Raises:
        NoInstancesGenerated: if the configuration yields no dates
    """
    dates = generate_recurrence_dates(config)
    if not dates:
        raise NoInstancesGenerated(
            "The recurrence configuration did not produce any event dates. Please adjust your settings."
        )

    shared = shared_fields_of(fields)

    # Parent and children are written together; a failed child insert
    # leaves no orphaned parent behind
    with transaction.atomic():
        parent = Event.objects.create(
            **shared,
            date_time=dates[0],
            is_recurring_parent=True,
            series_index=1,
            recurrence_pattern=config.pattern.value,
            recurrence_frequency=config.frequency,
            recurrence_days_of_week=list(config.days_of_week) if config.days_of_week else None,
            recurrence_day_of_month=config.day_of_month if config.pattern == RecurrencePattern.MONTHLY else None,
            recurrence_end_type=config.end_type.value,
            recurrence_end_date=config.end_date,
            recurrence_count=config.count if config.end_type == RecurrenceEndType.COUNT else None,
        )

        payloads = build_child_events(parent.pk, shared, dates[1:], start_index=2)
        children = Event.objects.bulk_create([Event(**payload) for payload in payloads])

    logger.info(
        "Created recurring event %s '%s' with %d instance(s)",
        parent.pk, parent.title, len(dates),
    )
    return parent, children


def recurrence_config_for(parent: Event) -> RecurrenceConfig:
    """Rebuild the RecurrenceConfig stored on a series parent"""
    if not parent.is_recurring_parent:
        raise ValueError(f"Event {parent.pk} is not a recurring parent")

    # The first event of the series anchors the start date
    return RecurrenceConfig(
        start_date=parent.date_time,
        pattern=parent.recurrence_pattern,
        frequency=parent.recurrence_frequency,
        days_of_week=tuple(parent.recurrence_days_of_week or ()) or None,
        day_of_month=parent.recurrence_day_of_month,
        end_type=parent.recurrence_end_type,
        end_date=parent.recurrence_end_date,
        count=parent.recurrence_count,
    )


def series_for(event: Event) -> QuerySet:
    """All events in the same series as `event`, ordered by series index"""
    parent_id = event.series_parent_id
    if parent_id is None:
        return Event.objects.filter(pk=event.pk)
    return Event.objects.filter(Q(pk=parent_id) | Q(parent_event_id=parent_id)).order_by('series_index')


def update_event(event: Event, fields: Dict[str, Any], apply_to_all: bool = False) -> int:
    """
    Update an event, optionally copying its shared fields to the whole series.

    Args:
        event: Event to update
        fields: New field values
        apply_to_all: Propagate shared fields to every other event in the series

    Returns:
        Number of other series members that were updated

    Raises:
        EventCancelled: if the event has been cancelled
    """
    if event.is_cancelled:
        raise EventCancelled(f"Event {event.pk} is cancelled and cannot be edited")

    with transaction.atomic():
        for name, value in fields.items():
            setattr(event, name, value)
        event.save()

        if not (apply_to_all and event.is_part_of_series):
            return 0

        shared = shared_fields_of(fields)
        if not shared:
            return 0

        propagated = series_for(event).exclude(pk=event.pk).update(**shared)

    logger.info(
        "Propagated %s from event %s to %d other event(s) in series %s",
        ', '.join(sorted(shared)), event.pk, propagated, event.series_parent_id,
    )
    return propagated
