import json
from datetime import date
from types import SimpleNamespace

import pytest
from hypothesis import given, strategies as st

from app.errors import EstimationError
from app.rules.refill import REFILL_LEAD_DAYS, depletion_date, doses_per_day, plan_refill, refill_date
from app.utils.refill_estimator import estimate_refill, parse_suggestion

TODAY = date(2026, 5, 1)


class StubCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def stub_client(content=None, error=None):
    completions = StubCompletions(content, error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def test_doses_per_day_counts_distinct_times():
    assert doses_per_day(['08:00', '20:00', '08:00']) == 2
    assert doses_per_day([]) == 1


def test_plan_refill_leads_depletion():
    plan = plan_refill(30, ['08:00', '20:00'], TODAY)
    assert plan.days_of_supply == 15
    assert plan.depletion_date == date(2026, 5, 16)
    assert plan.refill_date == date(2026, 5, 13)


def test_depletion_and_refill_dates():
    assert depletion_date(7, ['08:00'], TODAY) == date(2026, 5, 8)
    assert refill_date(7, ['08:00'], TODAY) == date(2026, 5, 5)
    assert refill_date(2, ['08:00'], TODAY) == TODAY


def test_empty_stock_refills_today():
    plan = plan_refill(0, ['08:00'], TODAY)
    assert plan.depletion_date == TODAY
    assert plan.refill_date == TODAY


@given(quantity=st.integers(min_value=0, max_value=10000),
       times=st.lists(st.sampled_from(['06:00', '08:00', '12:00', '18:00', '22:00']), max_size=5))
def test_refill_date_never_before_today(quantity, times):
    plan = plan_refill(quantity, times, TODAY)
    assert TODAY <= plan.refill_date <= plan.depletion_date
    assert (plan.depletion_date - plan.refill_date).days <= REFILL_LEAD_DAYS


def test_estimate_without_client_is_local():
    estimate = estimate_refill('Aspirin', 10, ['08:00'], today=TODAY, client=None)
    assert estimate.source == 'local'
    assert estimate.refill_date == date(2026, 5, 8)
    assert estimate.to_dict()['refill_date'] == '2026-05-08'


def test_estimate_uses_model_text_but_computed_date():
    reply = json.dumps({'refillDate': '2030-01-01', 'recommendation': 'Refill next week.'})
    client, completions = stub_client(reply)
    estimate = estimate_refill('Aspirin', 10, ['08:00'], today=TODAY, client=client)
    data = estimate.to_dict()
    assert data['source'] == 'llm'
    assert data['recommendation'] == 'Refill next week.'
    assert data['refill_date'] == '2026-05-08'
    assert 'Aspirin' in completions.calls[0]['messages'][0]['content']


@pytest.mark.parametrize('reply', [
    'not json at all',
    json.dumps({'recommendation': 'missing date'}),
    json.dumps({'refillDate': 20260508, 'recommendation': 'wrong type'}),
    json.dumps(['refillDate', 'recommendation']),
])
def test_unexpected_reply_shape_is_estimation_error(reply):
    client, _ = stub_client(reply)
    with pytest.raises(EstimationError):
        estimate_refill('Aspirin', 10, ['08:00'], today=TODAY, client=client)


def test_service_failure_is_estimation_error():
    import openai
    client, _ = stub_client(error=openai.OpenAIError('boom'))
    with pytest.raises(EstimationError) as exc:
        estimate_refill('Aspirin', 10, ['08:00'], today=TODAY, client=client)
    assert exc.value.to_dict()['retryable'] is True


def test_timeout_is_estimation_error():
    import httpx
    import openai
    request = httpx.Request('POST', 'https://llm.example.test/v1/chat/completions')
    client, completions = stub_client(error=openai.APITimeoutError(request=request))
    with pytest.raises(EstimationError) as exc:
        estimate_refill('Aspirin', 10, ['08:00'], today=TODAY, client=client)
    assert exc.value.status_code == 502
    assert len(completions.calls) == 1


def test_parse_suggestion_accepts_decoded_object():
    suggestion = parse_suggestion({'refillDate': '2026-05-08', 'recommendation': 'Soon.'})
    assert suggestion.refill_date == '2026-05-08'
