"""
Service for generating the dated instances of a recurring event.
Expands a recurrence configuration into concrete date-times and builds
the child event payloads that hang off a parent event.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from itertools import count as counter, islice
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from dateutil import rrule
from dateutil.relativedelta import relativedelta
from dateutil.rrule import MO, TU, WE, TH, FR, SA, SU


logger = logging.getLogger(__name__)


class RecurrencePattern(str, Enum):
    DAILY = 'daily'
    WEEKLY = 'weekly'
    MONTHLY = 'monthly'
    CUSTOM = 'custom'  # same expansion as WEEKLY, explicit weekday selection


class RecurrenceEndType(str, Enum):
    DATE = 'date'
    COUNT = 'count'
    NEVER = 'never'


# Hard upper bound on generated instances, whatever the end condition says
MAX_INSTANCES = {
    RecurrencePattern.DAILY: 365,
    RecurrencePattern.WEEKLY: 52,
    RecurrencePattern.MONTHLY: 24,
    RecurrencePattern.CUSTOM: 52,
}

# Weekly series without an end date stop one year (and a day) after the start
WEEKLY_HORIZON = timedelta(days=366)

# Weekday indices run 0=Sunday .. 6=Saturday
WEEKDAY_NAMES = ['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat']

# Mapping weekday indices to dateutil constants
WEEKDAY_MAP = {
    0: SU, 1: MO, 2: TU, 3: WE, 4: TH, 5: FR, 6: SA
}

# Only the first monthly candidate can precede the start date
_SKIPPABLE_CANDIDATES = 1


class InvalidRecurrenceConfig(ValueError):
    """Raised when a recurrence configuration can never be expanded safely."""


def sunday_weekday(dt: datetime) -> int:
    """Weekday index of a date with Sunday as 0"""
    return (dt.weekday() + 1) % 7


def clamp_day(year: int, month: int, day: int) -> int:
    """
    Clamp a day-of-month to the last valid day of the given month.

    e.g. day=31 in February -> 28, or 29 in a leap year.
    `month` is 1-based.
    """
    last_day = calendar.monthrange(year, month)[1]
    return min(day, last_day)


@dataclass(frozen=True)
class RecurrenceConfig:
    """
    Immutable description of how a recurring event repeats.

    `start_date` anchors the first instance and the time-of-day of every
    instance. `days_of_week` only applies to weekly/custom patterns and
    `day_of_month` only to the monthly pattern; both fall back to the
    start date when absent.
    """

    start_date: datetime
    pattern: RecurrencePattern
    frequency: int = 1
    days_of_week: Optional[Tuple[int, ...]] = None
    day_of_month: Optional[int] = None
    end_type: RecurrenceEndType = RecurrenceEndType.NEVER
    end_date: Optional[datetime] = None
    count: Optional[int] = None

    def __post_init__(self):
        try:
            pattern = RecurrencePattern(self.pattern)
        except ValueError:
            raise InvalidRecurrenceConfig(f"Unknown recurrence pattern: {self.pattern!r}") from None
        try:
            end_type = RecurrenceEndType(self.end_type)
        except ValueError:
            raise InvalidRecurrenceConfig(f"Unknown recurrence end type: {self.end_type!r}") from None
        object.__setattr__(self, 'pattern', pattern)
        object.__setattr__(self, 'end_type', end_type)

        if isinstance(self.frequency, bool) or not isinstance(self.frequency, int) or self.frequency < 1:
            raise InvalidRecurrenceConfig("Frequency must be a positive integer")

        if self.days_of_week:
            days = tuple(sorted(set(self.days_of_week)))
            if any(day < 0 or day > 6 for day in days):
                raise InvalidRecurrenceConfig("Days of week must be between 0 (Sunday) and 6 (Saturday)")
            object.__setattr__(self, 'days_of_week', days)
        else:
            object.__setattr__(self, 'days_of_week', None)

        if self.day_of_month is not None and not 1 <= self.day_of_month <= 31:
            raise InvalidRecurrenceConfig("Day of month must be between 1 and 31")

        if end_type == RecurrenceEndType.DATE:
            if self.end_date is None:
                raise InvalidRecurrenceConfig("An end date is required when the series ends on a date")
            if self.end_date < self.start_date:
                raise InvalidRecurrenceConfig("End date must not be before the start date")
        if end_type == RecurrenceEndType.COUNT:
            if self.count is None or self.count < 1:
                raise InvalidRecurrenceConfig("Count must be at least 1 when the series ends after a count")

    @property
    def max_instances(self) -> int:
        return MAX_INSTANCES[self.pattern]

    @property
    def weekdays(self) -> Tuple[int, ...]:
        """Selected weekdays, or the start date's weekday when none are selected"""
        return self.days_of_week or (sunday_weekday(self.start_date),)

    @property
    def target_day(self) -> int:
        return self.day_of_month or self.start_date.day


def _at_start_time(config: RecurrenceConfig, day) -> datetime:
    """Combine a calendar day with the start date's time-of-day"""
    return datetime.combine(day, config.start_date.timetz())


def _rrule_candidates(config: RecurrenceConfig, rule: rrule.rrule) -> Iterator[datetime]:
    # rrule truncates dtstart to whole seconds
    microsecond = config.start_date.microsecond
    for occurrence in rule:
        yield occurrence.replace(microsecond=microsecond)


def _daily_candidates(config: RecurrenceConfig) -> Iterator[datetime]:
    rule = rrule.rrule(
        rrule.DAILY,
        dtstart=config.start_date,
        interval=config.frequency,
        count=config.max_instances,
    )
    return _rrule_candidates(config, rule)


def _weekly_candidates(config: RecurrenceConfig) -> Iterator[datetime]:
    # Weeks start on Sunday, so "every N weeks" counts from the start date's
    # Sunday-aligned week; rrule never yields days before dtstart
    rule = rrule.rrule(
        rrule.WEEKLY,
        dtstart=config.start_date,
        interval=config.frequency,
        byweekday=[WEEKDAY_MAP[day] for day in config.weekdays],
        wkst=SU,
        count=config.max_instances,
    )
    return _rrule_candidates(config, rule)


def _monthly_candidates(config: RecurrenceConfig) -> Iterator[datetime]:
    first_of_month = config.start_date.date().replace(day=1)
    for month_index in counter(step=config.frequency):
        month = first_of_month + relativedelta(months=month_index)
        day = clamp_day(month.year, month.month, config.target_day)
        yield _at_start_time(config, month.replace(day=day))


CANDIDATE_STRATEGIES = {
    RecurrencePattern.DAILY: _daily_candidates,
    RecurrencePattern.WEEKLY: _weekly_candidates,
    RecurrencePattern.CUSTOM: _weekly_candidates,
    RecurrencePattern.MONTHLY: _monthly_candidates,
}


def _horizon(config: RecurrenceConfig) -> Optional[datetime]:
    """Latest instant a candidate may fall on, if the pattern has one"""
    if config.end_type == RecurrenceEndType.DATE:
        return config.end_date
    if config.pattern in (RecurrencePattern.WEEKLY, RecurrencePattern.CUSTOM):
        return config.start_date + WEEKLY_HORIZON
    return None


def _collect(config: RecurrenceConfig, candidates: Iterable[datetime]) -> List[datetime]:
    """
    Apply the termination rules shared by every pattern to a chronological
    stream of candidates.

    Stops at the first candidate past the horizon, once `count` instances
    were taken, or once the safety cap is reached. Candidates before the
    start date are skipped.
    """
    limit = config.max_instances
    if config.end_type == RecurrenceEndType.COUNT:
        limit = min(limit, config.count)
    horizon = _horizon(config)

    dates = []
    for candidate in islice(candidates, config.max_instances + _SKIPPABLE_CANDIDATES):
        if len(dates) >= limit:
            break
        if candidate < config.start_date:
            continue
        if horizon is not None and candidate > horizon:
            break
        dates.append(candidate)
    return dates


def generate_recurrence_dates(config: RecurrenceConfig) -> List[datetime]:
    """
    Generate every instance date of a recurring event.

    Args:
        config: RecurrenceConfig describing the series

    Returns:
        Chronologically ordered list of datetimes, never longer than the
        pattern's safety cap. Each datetime keeps the time-of-day (and
        tzinfo) of `config.start_date`. May be empty.
    """
    candidates = CANDIDATE_STRATEGIES[config.pattern](config)
    dates = _collect(config, candidates)

    logger.debug(
        "Generated %d %s instance(s) from %s (end: %s)",
        len(dates), config.pattern.value, config.start_date.isoformat(), config.end_type.value,
    )
    return dates


def build_child_events(
    parent_id: Any,
    parent_fields: Dict[str, Any],
    dates: Iterable[datetime],
    start_index: int = 2,
) -> List[Dict[str, Any]]:
    """
    Build child event payloads from a parent event and generated dates.

    Args:
        parent_id: Primary key of the (already stored) parent event
        parent_fields: Fields shared by every event in the series
        dates: Instance dates, in series order
        start_index: series_index of the first child. Defaults to 2 since
            the parent itself is series_index 1.

    Returns:
        One payload dict per date, in the same order as `dates`.
    """
    return [
        {
            **parent_fields,
            'date_time': date,
            'parent_event_id': parent_id,
            'series_index': start_index + offset,
            'is_recurring_parent': False,
        }
        for offset, date in enumerate(dates)
    ]


def describe_recurrence(config: RecurrenceConfig) -> str:
    """Human readable summary, e.g. 'Every 2 weeks on Mon, Wed, 6 times'"""
    units = {
        RecurrencePattern.DAILY: 'day',
        RecurrencePattern.WEEKLY: 'week',
        RecurrencePattern.CUSTOM: 'week',
        RecurrencePattern.MONTHLY: 'month',
    }
    unit = units[config.pattern]
    if config.frequency == 1:
        summary = f"Every {unit}"
    else:
        summary = f"Every {config.frequency} {unit}s"

    if config.pattern == RecurrencePattern.MONTHLY:
        summary += f" on day {config.target_day}"
    elif config.pattern != RecurrencePattern.DAILY:
        summary += " on " + ", ".join(WEEKDAY_NAMES[day] for day in config.weekdays)

    if config.end_type == RecurrenceEndType.COUNT:
        summary += f", {config.count} time{'s' if config.count != 1 else ''}"
    elif config.end_type == RecurrenceEndType.DATE:
        summary += f", until {config.end_date.date().isoformat()}"
    return summary
