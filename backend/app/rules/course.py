"""
Medication visibility and fixed-duration course expiry.

A medication is "effectively active" when its manual enable flag is on and,
if it follows a course, the course has not ended yet. Comparisons are made
on calendar days, so a course ending today is still active until midnight.
These are derived at read time and never stored.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Union

Moment = Union[date, datetime]


@dataclass(frozen=True)
class Course:
    """Regimen starting on ``start_date`` and lasting ``duration_days``."""
    duration_days: int
    start_date: date

    @property
    def end_date(self) -> date:
        return self.start_date + timedelta(days=self.duration_days)

    def to_dict(self):
        return {
            'duration_days': self.duration_days,
            'start_date': self.start_date.isoformat(),
        }


def as_day(moment: Moment) -> date:
    """Calendar day of a date or datetime (time-of-day is dropped)."""
    if isinstance(moment, datetime):
        return moment.date()
    return moment


def course_end_date(med) -> Optional[date]:
    course = getattr(med, 'course', None)
    return course.end_date if course else None


def is_effectively_active(med, now: Moment) -> bool:
    if med.active is False:
        return False
    course = getattr(med, 'course', None)
    if course is None:
        return True
    if course.duration_days <= 0:
        return False
    return as_day(now) <= course.end_date


def is_visible(med, now: Moment, show_inactive: bool = False) -> bool:
    if show_inactive:
        return True
    return is_effectively_active(med, now)


def remaining_course_days(med, now: Moment) -> Optional[int]:
    end = course_end_date(med)
    if end is None:
        return None
    return max(0, (end - as_day(now)).days)


def visible_medications(medications, now: Moment, show_inactive: bool = False):
    return [m for m in medications if is_visible(m, now, show_inactive)]
