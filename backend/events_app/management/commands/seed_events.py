"""
Management command to seed the database with sample events.
Creates a one-off event and a few recurring series for testing.
"""

import uuid
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from events_app.models import Event
from events_app.services.recurrence import RecurrenceConfig, describe_recurrence
from events_app.services.series import create_recurring_event


class Command(BaseCommand):
    help = 'Seed the database with sample events and recurring series'

    def add_arguments(self, parser):
        parser.add_argument(
            '--community',
            type=uuid.UUID,
            default=None,
            help='Community id to attach the sample events to (default: a new random id)',
        )

    def handle(self, *args, **options):
        # Check if data already exists
        if Event.objects.exists():
            self.stdout.write(
                self.style.WARNING(
                    f'Database already has {Event.objects.count()} events. '
                    'Skipping seed to avoid duplicates. Use clear_events command first if needed.'
                )
            )
            return

        self.stdout.write('Seeding events...')

        community_id = options['community'] or uuid.uuid4()
        now = timezone.localtime()
        today_7am = now.replace(hour=7, minute=0, second=0, microsecond=0)
        today_6pm = now.replace(hour=18, minute=0, second=0, microsecond=0)

        # Find next Monday for weekly series
        days_until_monday = (7 - today_7am.weekday()) % 7 or 7
        next_monday_7am = today_7am + timedelta(days=days_until_monday)

        # 1. One-off event
        kickoff = Event.objects.create(
            title="Community Kickoff",
            description="Welcome session for new members",
            date_time=now + timedelta(days=2),
            venue="Main Hall",
            capacity=100,
            community_id=community_id,
        )
        self.stdout.write(f'Created one-off {kickoff.title} at {kickoff.date_time}')

        # 2. Mon/Wed/Fri morning run, 12 sessions
        series = [
            (
                {
                    'title': "Morning Run",
                    'description': "Easy 5k around the park",
                    'venue': "City Park Gate",
                    'capacity': 25,
                    'community_id': community_id,
                },
                RecurrenceConfig(
                    start_date=next_monday_7am,
                    pattern='weekly',
                    days_of_week=(1, 3, 5),
                    end_type='count',
                    count=12,
                ),
            ),
            # 3. Monthly meetup on the last day of the month
            (
                {
                    'title': "Month-end Meetup",
                    'venue': "Rooftop Cafe",
                    'capacity': 40,
                    'price': 150,
                    'community_id': community_id,
                },
                RecurrenceConfig(
                    start_date=today_6pm,
                    pattern='monthly',
                    day_of_month=31,
                    end_type='never',
                ),
            ),
        ]

        for fields, config in series:
            parent, children = create_recurring_event(fields, config)
            self.stdout.write(
                f'Created {parent.title}: {describe_recurrence(config)} '
                f'({len(children) + 1} events starting {parent.date_time})'
            )

        self.stdout.write(
            self.style.SUCCESS(
                f'Successfully seeded {Event.objects.count()} events'
            )
        )
