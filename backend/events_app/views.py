"""
Views for the events API.
Provides CRUD operations for events plus recurring series creation,
preview, series listing and series recurrence summaries.
"""

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from .models import Event
from .serializers import EventSerializer, RecurrenceConfigSerializer
from .services.recurrence import describe_recurrence, generate_recurrence_dates
from .services.series import (
    EventCancelled,
    NoInstancesGenerated,
    create_recurring_event,
    recurrence_config_for,
    series_for,
    update_event,
)


class EventViewSet(viewsets.ModelViewSet):
    """
    ViewSet for CRUD operations on Event.
    Provides additional actions for recurring series.
    """
    queryset = Event.objects.all()
    serializer_class = EventSerializer

    def create(self, request: Request, *args, **kwargs):
        """
        Create a single event, or a recurring series when a `recurrence`
        object is supplied:
        {
            "title": "Morning Run",
            "venue": "Park",
            "capacity": 20,
            "community_id": "...",
            "recurrence": {
                "start_date": "2025-01-20T07:00:00Z",
                "pattern": "weekly",
                "frequency": 1,
                "days_of_week": [1, 3, 5],
                "end_type": "count",
                "count": 6
            }
        }
        The first generated date becomes the parent event.
        """
        recurrence_data = request.data.get('recurrence')
        if not recurrence_data:
            return super().create(request, *args, **kwargs)

        event_data = {key: value for key, value in request.data.items() if key != 'recurrence'}
        recurrence = RecurrenceConfigSerializer(data=recurrence_data)
        recurrence.is_valid(raise_exception=True)
        event_data['date_time'] = recurrence.validated_data['start_date']

        serializer = self.get_serializer(data=event_data)
        serializer.is_valid(raise_exception=True)

        try:
            parent, children = create_recurring_event(serializer.validated_data, recurrence.to_config())
        except NoInstancesGenerated as exc:
            return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        data = self.get_serializer(parent).data
        data['instances_created'] = len(children) + 1
        return Response(data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, *args, **kwargs):
        """
        Update an event. Pass "apply_to_all": true to copy the shared
        fields (title, venue, capacity, ...) to every event in its series.
        """
        partial = kwargs.pop('partial', False)
        event = self.get_object()

        apply_to_all = request.data.get('apply_to_all', False) in (True, 'true', 'True', '1', 1)
        event_data = {key: value for key, value in request.data.items() if key != 'apply_to_all'}

        serializer = self.get_serializer(event, data=event_data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            propagated = update_event(event, serializer.validated_data, apply_to_all=apply_to_all)
        except EventCancelled as exc:
            return Response({'error': str(exc)}, status=status.HTTP_409_CONFLICT)

        data = self.get_serializer(event).data
        data['series_updated'] = propagated
        return Response(data, status=status.HTTP_200_OK)

    @action(detail=False, methods=['post'])
    def preview(self, request: Request):
        """
        Preview the dates a recurrence configuration would generate.
        Nothing is stored.
        """
        serializer = RecurrenceConfigSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        config = serializer.to_config()

        dates = generate_recurrence_dates(config)
        return Response({
            'summary': describe_recurrence(config),
            'count': len(dates),
            'max_instances': config.max_instances,
            'dates': [date.isoformat() for date in dates],
        })

    @action(detail=True, methods=['get'])
    def series(self, request: Request, pk=None):
        """List every event in the same series, parent first"""
        event = self.get_object()
        serializer = self.get_serializer(series_for(event), many=True)
        return Response(serializer.data)

    @action(detail=True, methods=['get'])
    def recurrence(self, request: Request, pk=None):
        """
        Describe how the event's series repeats, as stored on its parent.
        Returns 404 for events that are not part of a series.
        """
        event = self.get_object()
        parent_id = event.series_parent_id
        if parent_id is None:
            return Response(
                {'error': 'Event is not part of a recurring series'},
                status=status.HTTP_404_NOT_FOUND
            )

        parent = Event.objects.get(pk=parent_id)
        config = recurrence_config_for(parent)
        return Response({
            'parent_event': str(parent.pk),
            'summary': describe_recurrence(config),
            'pattern': config.pattern.value,
            'frequency': config.frequency,
            'days_of_week': list(config.weekdays) if config.pattern.value in ('weekly', 'custom') else None,
            'day_of_month': config.target_day if config.pattern.value == 'monthly' else None,
            'end_type': config.end_type.value,
            'end_date': config.end_date.isoformat() if config.end_date else None,
            'count': config.count,
            'instances': series_for(parent).count(),
        })
