"""
Refill date arithmetic.

Stock runs out after floor(quantity / doses per day) days; the refill is
suggested a few days earlier but never before today.
"""
from dataclasses import dataclass
from datetime import date, timedelta

REFILL_LEAD_DAYS = 3


@dataclass(frozen=True)
class RefillPlan:
    today: date
    doses_per_day: int
    days_of_supply: int
    depletion_date: date
    refill_date: date


def doses_per_day(dose_times) -> int:
    return max(1, len(set(dose_times or [])))


def depletion_date(quantity: int, dose_times, today: date) -> date:
    return today + timedelta(days=max(0, quantity) // doses_per_day(dose_times))


def refill_date(quantity: int, dose_times, today: date,
                lead_days: int = REFILL_LEAD_DAYS) -> date:
    depletion = depletion_date(quantity, dose_times, today)
    return max(today, depletion - timedelta(days=lead_days))


def plan_refill(quantity: int, dose_times, today: date,
                lead_days: int = REFILL_LEAD_DAYS) -> RefillPlan:
    per_day = doses_per_day(dose_times)
    supply = max(0, quantity) // per_day
    depletion = depletion_date(quantity, dose_times, today)
    refill = refill_date(quantity, dose_times, today, lead_days)
    return RefillPlan(
        today=today,
        doses_per_day=per_day,
        days_of_supply=supply,
        depletion_date=depletion,
        refill_date=refill,
    )
