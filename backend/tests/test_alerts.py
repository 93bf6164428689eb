from datetime import date, datetime, timedelta, timezone
from urllib.parse import unquote
from zoneinfo import ZoneInfo

from hypothesis import given, strategies as st

from app.rules.alerts import (
    LOW_STOCK_THRESHOLD, compute_alerts, low_stock_message, time_of_day, whatsapp_link,
)
from conftest import make_med

NOW = datetime(2026, 3, 10, 8, 0, tzinfo=timezone.utc)


def test_not_evaluated_without_time():
    alerts = compute_alerts([make_med(quantity=1)], None)
    assert alerts.status == 'not_evaluated'
    assert not alerts.evaluated
    assert not alerts.all_clear
    assert alerts.low_stock_alerts == []


def test_all_clear_is_distinct_from_not_evaluated():
    alerts = compute_alerts([make_med(quantity=50, dose_times=['09:00'])], NOW)
    assert alerts.evaluated
    assert alerts.all_clear
    assert alerts.status == 'all_clear'


def test_low_stock_threshold():
    low = make_med(name='Low', quantity=LOW_STOCK_THRESHOLD - 1, dose_times=[])
    ok = make_med(name='Ok', quantity=LOW_STOCK_THRESHOLD, dose_times=[])
    alerts = compute_alerts([low, ok], NOW)
    assert [m.name for m in alerts.low_stock_alerts] == ['Low']
    assert alerts.status == 'alerts'


def test_dose_time_matches_exact_minute_only():
    med = make_med(dose_times=['08:00'])
    assert compute_alerts([med], NOW).dose_time_alerts == [med]
    assert compute_alerts([med], NOW + timedelta(minutes=1)).dose_time_alerts == []


def test_dose_time_uses_viewer_zone():
    med = make_med(dose_times=['09:00'])
    paris = NOW.astimezone(ZoneInfo('Europe/Paris'))
    assert time_of_day(paris) == '09:00'
    assert compute_alerts([med], paris).dose_time_alerts == [med]


def test_inactive_and_expired_never_alert():
    paused = make_med(quantity=0, active=False)
    finished = make_med(quantity=0, course_days=3, course_start=date(2026, 1, 1))
    alerts = compute_alerts([paused, finished], NOW)
    assert alerts.dose_time_alerts == []
    assert alerts.low_stock_alerts == []
    assert alerts.all_clear


def test_alerts_keep_list_order():
    meds = [make_med(name=n, quantity=1) for n in ('C', 'A', 'B')]
    alerts = compute_alerts(meds, NOW)
    assert [m.name for m in alerts.dose_time_alerts] == ['C', 'A', 'B']
    assert [m.name for m in alerts.low_stock_alerts] == ['C', 'A', 'B']


@given(quantity=st.integers(min_value=0, max_value=1000))
def test_low_stock_iff_below_threshold(quantity):
    med = make_med(quantity=quantity, dose_times=[])
    alerts = compute_alerts([med], NOW)
    assert (med in alerts.low_stock_alerts) == (quantity < LOW_STOCK_THRESHOLD)


def test_low_stock_message_lists_each_medication():
    meds = [make_med(name='Aspirin', quantity=2), make_med(name='Vitamin D', quantity=0)]
    message = low_stock_message('Sam', meds)
    assert message.startswith('Hi Sam,')
    assert '- Aspirin (only 2 left)' in message
    assert '- Vitamin D (only 0 left)' in message


def test_whatsapp_link_strips_phone_and_encodes_text():
    url = whatsapp_link('+1 (555) 123-4567', 'Hi Sam & co\nline two')
    assert url.startswith('https://wa.me/15551234567?text=')
    encoded = url.split('?text=', 1)[1]
    assert ' ' not in encoded and '&' not in encoded
    assert unquote(encoded) == 'Hi Sam & co\nline two'
