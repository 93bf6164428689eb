"""
Refill estimation backed by an OpenAI-compatible chat completion.

The dates always come from ``app.rules.refill``; the model only writes the
recommendation text. Its reply must be a JSON object with string
``refillDate`` and ``recommendation`` fields, anything else is an
EstimationError. Without an API key the recommendation is written locally.
"""
import os
import json
import logging
from dataclasses import dataclass
from datetime import date

import openai
from pydantic import BaseModel, ConfigDict, Field, StrictStr
from pydantic import ValidationError as SchemaError

from app.errors import EstimationError
from app.rules.refill import plan_refill, RefillPlan

logger = logging.getLogger(__name__)


class RefillSuggestion(BaseModel):
    """Shape the text-generation service must return."""
    model_config = ConfigDict(populate_by_name=True)

    refill_date: StrictStr = Field(alias='refillDate')
    recommendation: StrictStr


@dataclass
class RefillEstimate:
    medication_name: str
    plan: RefillPlan
    recommendation: str
    source: str

    @property
    def refill_date(self) -> date:
        return self.plan.refill_date

    @property
    def depletion_date(self) -> date:
        return self.plan.depletion_date

    def to_dict(self):
        return {
            'medication_name': self.medication_name,
            'refill_date': self.plan.refill_date.isoformat(),
            'depletion_date': self.plan.depletion_date.isoformat(),
            'days_of_supply': self.plan.days_of_supply,
            'doses_per_day': self.plan.doses_per_day,
            'recommendation': self.recommendation,
            'source': self.source,
        }


def get_llm_client():
    """Build the chat client from the environment, or None when unconfigured."""
    api_key = os.getenv('REFILL_LLM_API_KEY') or os.getenv('OPENAI_API_KEY')
    if not api_key:
        return None
    return openai.OpenAI(
        api_key=api_key,
        base_url=os.getenv('REFILL_LLM_BASE_URL') or None,
        timeout=float(os.getenv('REFILL_LLM_TIMEOUT', '20')),
        max_retries=0,
    )


def build_prompt(name: str, quantity: int, dose_times, plan: RefillPlan) -> str:
    times = ', '.join(sorted(set(dose_times))) or 'no fixed times'
    return (
        f"Medication: {name}\n"
        f"Current quantity: {quantity}\n"
        f"Dosing schedule: {times} ({plan.doses_per_day} dose(s) per day)\n"
        f"Today's date: {plan.today.isoformat()}\n"
        f"Supply lasts {plan.days_of_supply} day(s) and runs out on {plan.depletion_date.isoformat()}.\n"
        f"Suggested refill date: {plan.refill_date.isoformat()}.\n\n"
        "Write a brief, friendly recommendation (one or two sentences) about when to refill. "
        "Do not give dosing or medical advice. "
        'Respond ONLY with a JSON object: {"refillDate": "YYYY-MM-DD", "recommendation": "..."}'
    )


def local_recommendation(name: str, plan: RefillPlan) -> str:
    if plan.days_of_supply == 0:
        return f"You are out of {name}. Refill it today."
    return (
        f"Your {name} supply lasts about {plan.days_of_supply} day(s) and runs out on "
        f"{plan.depletion_date.isoformat()}. Plan to refill by {plan.refill_date.isoformat()}."
    )


def parse_suggestion(content) -> RefillSuggestion:
    """Validate a raw model reply (JSON text or already-decoded object)."""
    try:
        data = json.loads(content) if isinstance(content, str) else content
        return RefillSuggestion.model_validate(data)
    except (ValueError, SchemaError) as e:
        logger.error('Refill suggestion failed validation: %s', e)
        raise EstimationError('The refill assistant returned data in an unexpected format.')


def estimate_refill(name: str, quantity: int, dose_times, today: date = None,
                    client=None) -> RefillEstimate:
    today = today or date.today()
    plan = plan_refill(quantity, dose_times, today)

    client = client if client is not None else get_llm_client()
    if client is None:
        return RefillEstimate(name, plan, local_recommendation(name, plan), 'local')

    model = os.getenv('REFILL_LLM_MODEL', 'gpt-4o-mini')
    try:
        resp = client.chat.completions.create(
            model=model,
            messages=[{'role': 'user', 'content': build_prompt(name, quantity, dose_times, plan)}],
            temperature=0.2,
            response_format={'type': 'json_object'},
        )
    except openai.OpenAIError as e:
        logger.error('Refill estimation call failed for %s: %s', name, e)
        raise EstimationError('Failed to get a refill prediction. Please try again.')

    if not resp.choices:
        raise EstimationError('The refill assistant returned an empty response.')
    suggestion = parse_suggestion((resp.choices[0].message.content or '').strip())

    if suggestion.refill_date != plan.refill_date.isoformat():
        logger.info('Model suggested %s for %s; keeping computed %s',
                    suggestion.refill_date, name, plan.refill_date.isoformat())

    return RefillEstimate(name, plan, suggestion.recommendation, 'llm')
