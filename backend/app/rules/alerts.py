"""
Dose-time and low-stock alerts derived from the medication list.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from urllib.parse import quote

from app.rules.course import is_effectively_active

LOW_STOCK_THRESHOLD = 5


@dataclass
class AlertSet:
    """Result of one evaluation. ``evaluated_at`` is None until a time is known."""
    dose_time_alerts: List = field(default_factory=list)
    low_stock_alerts: List = field(default_factory=list)
    evaluated_at: Optional[datetime] = None

    @property
    def evaluated(self) -> bool:
        return self.evaluated_at is not None

    @property
    def all_clear(self) -> bool:
        return self.evaluated and not self.dose_time_alerts and not self.low_stock_alerts

    @property
    def status(self) -> str:
        if not self.evaluated:
            return 'not_evaluated'
        return 'all_clear' if self.all_clear else 'alerts'


def time_of_day(now: datetime) -> str:
    """Zero-padded 24-hour "HH:MM" in whatever zone ``now`` carries."""
    return now.strftime('%H:%M')


def is_low_stock(med) -> bool:
    return med.quantity < LOW_STOCK_THRESHOLD


def compute_alerts(medications, now: Optional[datetime]) -> AlertSet:
    if now is None:
        return AlertSet()

    current = time_of_day(now)
    active = [m for m in medications if is_effectively_active(m, now)]

    return AlertSet(
        dose_time_alerts=[m for m in active if current in m.dose_times],
        low_stock_alerts=[m for m in active if is_low_stock(m)],
        evaluated_at=now,
    )


def low_stock_message(contact_name: str, medications) -> str:
    lines = '\n'.join(f'- {m.name} (only {m.quantity} left)' for m in medications)
    return (
        f'Hi {contact_name}, this is a reminder about my medications '
        f'that are running low:\n\n{lines}'
    )


def whatsapp_link(phone: str, message: str) -> str:
    digits = ''.join(ch for ch in phone if ch.isdigit())
    return f'https://wa.me/{digits}?text={quote(message, safe="")}'
