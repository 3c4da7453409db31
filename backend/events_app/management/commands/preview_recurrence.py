"""
Management command to print the dates a recurrence configuration generates.
Nothing is written to the database.
"""

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from events_app.services.recurrence import (
    InvalidRecurrenceConfig,
    RecurrenceConfig,
    RecurrenceEndType,
    RecurrencePattern,
    describe_recurrence,
    generate_recurrence_dates,
)


def _parse_datetime_arg(value, name):
    parsed = parse_datetime(value)
    if not parsed:
        raise CommandError(f'--{name} must be a valid ISO datetime')
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


class Command(BaseCommand):
    help = 'Preview the dates generated by a recurrence configuration'

    def add_arguments(self, parser):
        parser.add_argument('--start', required=True, help='First event, ISO datetime')
        parser.add_argument('--pattern', required=True, choices=[p.value for p in RecurrencePattern])
        parser.add_argument('--frequency', type=int, default=1, help='Every N days/weeks/months')
        parser.add_argument(
            '--days',
            type=int,
            nargs='*',
            default=None,
            help='Weekday indices for weekly/custom, 0=Sunday .. 6=Saturday',
        )
        parser.add_argument('--day-of-month', type=int, default=None)
        parser.add_argument(
            '--end-type',
            choices=[e.value for e in RecurrenceEndType],
            default=RecurrenceEndType.NEVER.value,
        )
        parser.add_argument('--end-date', default=None, help='Last allowed instant, ISO datetime')
        parser.add_argument('--count', type=int, default=None)

    def handle(self, *args, **options):
        end_date = options['end_date']
        try:
            config = RecurrenceConfig(
                start_date=_parse_datetime_arg(options['start'], 'start'),
                pattern=options['pattern'],
                frequency=options['frequency'],
                days_of_week=tuple(options['days']) if options['days'] else None,
                day_of_month=options['day_of_month'],
                end_type=options['end_type'],
                end_date=_parse_datetime_arg(end_date, 'end-date') if end_date else None,
                count=options['count'],
            )
        except InvalidRecurrenceConfig as exc:
            raise CommandError(str(exc))

        dates = generate_recurrence_dates(config)

        self.stdout.write(describe_recurrence(config))
        for index, date in enumerate(dates, start=1):
            self.stdout.write(f'{index:>3}  {date:%a %Y-%m-%d %H:%M}')

        self.stdout.write(
            self.style.SUCCESS(
                f'{len(dates)} instance(s) (cap {config.max_instances})'
            )
        )
