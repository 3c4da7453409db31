"""
Management command to clear all events (single events and recurring series)
"""

from django.core.management.base import BaseCommand
from events_app.models import Event


class Command(BaseCommand):
    help = 'Clear all events (single events and recurring series)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--confirm',
            action='store_true',
            help='Confirm that you want to delete all data',
        )

    def handle(self, *args, **options):
        if not options['confirm']:
            self.stdout.write(
                self.style.WARNING(
                    'This will delete ALL events. Use --confirm to proceed.'
                )
            )
            return

        # Delete children first so no parent_event links are nulled one by one
        child_count = Event.objects.filter(parent_event__isnull=False).count()
        Event.objects.filter(parent_event__isnull=False).delete()

        event_count = Event.objects.count()
        Event.objects.all().delete()

        self.stdout.write(
            self.style.SUCCESS(
                f'Successfully cleared {event_count} events and {child_count} series instances'
            )
        )
