"""
Test cases for events API views.
Tests CRUD operations, recurring series creation, preview and series operations.
"""

import json
import uuid
from datetime import datetime, timezone

from django.test import TestCase, Client

from events_app.models import Event
from events_app.services.recurrence import RecurrenceConfig
from events_app.services.series import create_recurring_event


class EventViewSetTest(TestCase):
    """Test Event CRUD operations"""

    def setUp(self):
        self.client = Client()
        self.community_id = str(uuid.uuid4())
        self.monday_9am = datetime(2025, 1, 20, 9, 0, 0, tzinfo=timezone.utc)

        self.event = Event.objects.create(
            title="Test Event",
            date_time=self.monday_9am,
            venue="Main Hall",
            capacity=30,
            community_id=self.community_id,
        )

    def test_list_events(self):
        """Test GET /api/events/"""
        response = self.client.get('/api/events/')
        self.assertEqual(response.status_code, 200)

        data = response.json()
        self.assertEqual(len(data), 1)
        self.assertEqual(data[0]['title'], "Test Event")
        self.assertFalse(data[0]['is_recurring_parent'])

    def test_create_single_event(self):
        """Test POST /api/events/ without recurrence"""
        new_event_data = {
            'title': 'New Event',
            'date_time': '2025-01-21T10:00:00Z',
            'venue': 'Library',
            'capacity': 15,
            'community_id': self.community_id,
            'external_link': 'https://example.com',
        }

        response = self.client.post(
            '/api/events/',
            data=json.dumps(new_event_data),
            content_type='application/json'
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(Event.objects.count(), 2)

        created = Event.objects.get(title='New Event')
        self.assertEqual(created.capacity, 15)
        self.assertFalse(created.is_recurring_parent)
        self.assertIsNone(created.series_index)

    def test_create_event_validation(self):
        """Test validation on event creation"""
        invalid_data = {
            'title': 'Invalid Event',
            'venue': 'Library',
            'capacity': 0,  # Invalid
            'community_id': 'not-a-uuid',  # Invalid
        }

        response = self.client.post(
            '/api/events/',
            data=json.dumps(invalid_data),
            content_type='application/json'
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn('capacity', response.json())

    def test_series_fields_read_only(self):
        """Series linkage cannot be set through the API"""
        response = self.client.post(
            '/api/events/',
            data=json.dumps({
                'title': 'Sneaky',
                'venue': 'Library',
                'capacity': 5,
                'community_id': self.community_id,
                'is_recurring_parent': True,
                'series_index': 7,
            }),
            content_type='application/json'
        )

        self.assertEqual(response.status_code, 201)
        created = Event.objects.get(title='Sneaky')
        self.assertFalse(created.is_recurring_parent)
        self.assertIsNone(created.series_index)

    def test_update_event(self):
        """Test PUT /api/events/{id}/"""
        updated_data = {
            'title': 'Updated Event',
            'date_time': self.monday_9am.isoformat(),
            'venue': 'Main Hall',
            'capacity': 60,
            'community_id': self.community_id,
        }

        response = self.client.put(
            f'/api/events/{self.event.id}/',
            data=json.dumps(updated_data),
            content_type='application/json'
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['series_updated'], 0)

        self.event.refresh_from_db()
        self.assertEqual(self.event.title, 'Updated Event')
        self.assertEqual(self.event.capacity, 60)

    def test_delete_event(self):
        """Test DELETE /api/events/{id}/"""
        response = self.client.delete(f'/api/events/{self.event.id}/')
        self.assertEqual(response.status_code, 204)
        self.assertEqual(Event.objects.count(), 0)


class RecurringEventCreateTest(TestCase):
    """Test creating recurring series through the API"""

    def setUp(self):
        self.client = Client()
        self.community_id = str(uuid.uuid4())
        self.payload = {
            'title': 'Morning Run',
            'venue': 'City Park',
            'capacity': 20,
            'community_id': self.community_id,
            'recurrence': {
                'start_date': '2025-01-20T07:00:00Z',
                'pattern': 'weekly',
                'frequency': 1,
                'days_of_week': [1, 3, 5],
                'end_type': 'count',
                'count': 6,
            },
        }

    def post(self, payload):
        return self.client.post(
            '/api/events/',
            data=json.dumps(payload),
            content_type='application/json'
        )

    def test_create_weekly_series(self):
        response = self.post(self.payload)

        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data['instances_created'], 6)
        self.assertTrue(data['is_recurring_parent'])
        self.assertEqual(data['series_index'], 1)
        self.assertEqual(data['recurrence_days_of_week'], [1, 3, 5])

        self.assertEqual(Event.objects.count(), 6)
        self.assertEqual(Event.objects.filter(parent_event_id=data['id']).count(), 5)

    def test_create_monthly_series_until_date(self):
        self.payload['recurrence'] = {
            'start_date': '2024-01-31T18:00:00Z',
            'pattern': 'monthly',
            'day_of_month': 31,
            'end_type': 'date',
            'end_date': '2024-06-30T23:59:00Z',
        }
        response = self.post(self.payload)

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['instances_created'], 6)
        days = [event.date_time.day for event in Event.objects.order_by('series_index')]
        self.assertEqual(days, [31, 29, 31, 30, 31, 30])

    def test_zero_frequency_rejected(self):
        self.payload['recurrence']['frequency'] = 0
        response = self.post(self.payload)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(Event.objects.count(), 0)

    def test_count_required(self):
        del self.payload['recurrence']['count']
        response = self.post(self.payload)

        self.assertEqual(response.status_code, 400)
        self.assertIn('count', response.json())

    def test_invalid_weekday_rejected(self):
        self.payload['recurrence']['days_of_week'] = [1, 9]
        response = self.post(self.payload)
        self.assertEqual(response.status_code, 400)

    def test_no_instances_generated(self):
        self.payload['recurrence'] = {
            'start_date': '2025-01-20T07:00:00Z',
            'pattern': 'weekly',
            'days_of_week': [3],
            'end_type': 'date',
            'end_date': '2025-01-20T07:00:00Z',
        }
        response = self.post(self.payload)

        self.assertEqual(response.status_code, 400)
        self.assertIn('error', response.json())
        self.assertEqual(Event.objects.count(), 0)

    def test_invalid_event_fields(self):
        self.payload['capacity'] = -1
        response = self.post(self.payload)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(Event.objects.count(), 0)


class RecurrencePreviewTest(TestCase):
    """Test POST /api/events/preview/"""

    def setUp(self):
        self.client = Client()

    def preview(self, payload):
        return self.client.post(
            '/api/events/preview/',
            data=json.dumps(payload),
            content_type='application/json'
        )

    def test_preview_weekly(self):
        response = self.preview({
            'start_date': '2025-01-20T09:00:00Z',
            'pattern': 'weekly',
            'frequency': 2,
            'days_of_week': [3, 1],
            'end_type': 'count',
            'count': 4,
        })

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['count'], 4)
        self.assertEqual(data['max_instances'], 52)
        self.assertEqual(data['summary'], 'Every 2 weeks on Mon, Wed, 4 times')
        self.assertEqual(
            [date[:10] for date in data['dates']],
            ['2025-01-20', '2025-01-22', '2025-02-03', '2025-02-05'],
        )
        self.assertEqual(Event.objects.count(), 0)

    def test_preview_never_is_capped(self):
        response = self.preview({
            'start_date': '2025-01-20T09:00:00Z',
            'pattern': 'daily',
        })

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['count'], 365)

    def test_preview_requires_end_date(self):
        response = self.preview({
            'start_date': '2025-01-20T09:00:00Z',
            'pattern': 'daily',
            'end_type': 'date',
        })

        self.assertEqual(response.status_code, 400)
        self.assertIn('end_date', response.json())

    def test_preview_end_date_before_start(self):
        response = self.preview({
            'start_date': '2025-01-20T09:00:00Z',
            'pattern': 'daily',
            'end_type': 'date',
            'end_date': '2025-01-10T09:00:00Z',
        })
        self.assertEqual(response.status_code, 400)

    def test_preview_unknown_pattern(self):
        response = self.preview({
            'start_date': '2025-01-20T09:00:00Z',
            'pattern': 'yearly',
        })
        self.assertEqual(response.status_code, 400)


class SeriesOperationsTest(TestCase):
    """Test series listing and apply-to-all updates"""

    def setUp(self):
        self.client = Client()
        self.parent, _ = create_recurring_event(
            {
                'title': 'Book Club',
                'venue': 'Library',
                'capacity': 12,
                'community_id': uuid.uuid4(),
            },
            RecurrenceConfig(
                start_date=datetime(2025, 1, 20, 18, 0, tzinfo=timezone.utc),
                pattern='daily',
                frequency=7,
                end_type='count',
                count=4,
            ),
        )
        self.child = Event.objects.get(series_index=3)

    def test_list_series_from_child(self):
        """Test GET /api/events/{id}/series/"""
        response = self.client.get(f'/api/events/{self.child.id}/series/')

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual([item['series_index'] for item in data], [1, 2, 3, 4])
        self.assertEqual(data[0]['id'], str(self.parent.id))

    def test_patch_apply_to_all(self):
        response = self.client.patch(
            f'/api/events/{self.child.id}/',
            data=json.dumps({'venue': 'Community Centre', 'apply_to_all': True}),
            content_type='application/json'
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['series_updated'], 3)
        self.assertEqual(Event.objects.filter(venue='Community Centre').count(), 4)

    def test_patch_single_instance(self):
        response = self.client.patch(
            f'/api/events/{self.child.id}/',
            data=json.dumps({'venue': 'Community Centre'}),
            content_type='application/json'
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(Event.objects.filter(venue='Community Centre').count(), 1)

    def test_patch_cancelled_event(self):
        self.child.is_cancelled = True
        self.child.save()

        response = self.client.patch(
            f'/api/events/{self.child.id}/',
            data=json.dumps({'venue': 'Community Centre', 'apply_to_all': True}),
            content_type='application/json'
        )

        self.assertEqual(response.status_code, 409)
        self.assertIn('error', response.json())
        self.assertEqual(Event.objects.filter(venue='Library').count(), 4)

    def test_series_recurrence_from_child(self):
        """Test GET /api/events/{id}/recurrence/"""
        response = self.client.get(f'/api/events/{self.child.id}/recurrence/')

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['parent_event'], str(self.parent.id))
        self.assertEqual(data['summary'], 'Every 7 days, 4 times')
        self.assertEqual(data['pattern'], 'daily')
        self.assertEqual(data['frequency'], 7)
        self.assertIsNone(data['days_of_week'])
        self.assertEqual(data['count'], 4)
        self.assertEqual(data['instances'], 4)

    def test_recurrence_of_standalone_event(self):
        event = Event.objects.create(
            title='One-off',
            date_time=datetime(2025, 1, 21, 18, 0, tzinfo=timezone.utc),
            venue='Library',
            capacity=12,
            community_id=uuid.uuid4(),
        )

        response = self.client.get(f'/api/events/{event.id}/recurrence/')

        self.assertEqual(response.status_code, 404)
        self.assertIn('error', response.json())
