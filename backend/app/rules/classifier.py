"""
Blood pressure and glucose categories.

Blood pressure uses one precedence table, first match wins:

    Hypertensive Crisis   SYS > 180 or DIA > 120
    Hypertension Stage 2  SYS >= 140 or DIA >= 90
    Hypertension Stage 1  SYS >= 130 or DIA >= 80
    Elevated              SYS 120-129 and DIA < 80
    Hypotension           SYS < 90 or DIA < 60
    Normal                everything else

Glucose (mg/dL) depends on the reading type: fasting readings use the
70/100/126 cut-offs, post-meal and random readings use 70/140/200.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class Category:
    key: str
    label: str
    range_text: str

    def to_dict(self):
        return {'key': self.key, 'label': self.label, 'range': self.range_text}


HYPERTENSIVE_CRISIS = Category('hypertensive_crisis', 'Hypertensive Crisis', 'SYS > 180 or DIA > 120')
HYPERTENSION_2 = Category('hypertension_stage_2', 'Hypertension - Stage 2', 'SYS >= 140 or DIA >= 90')
HYPERTENSION_1 = Category('hypertension_stage_1', 'Hypertension - Stage 1', 'SYS 130-139 or DIA 80-89')
ELEVATED = Category('elevated', 'Elevated', 'SYS 120-129 and DIA < 80')
HYPOTENSION = Category('hypotension', 'Hypotension', 'SYS < 90 or DIA < 60')
NORMAL = Category('normal', 'Normal', 'SYS 90-119 and DIA 60-79')

BP_CATEGORIES = (
    HYPERTENSIVE_CRISIS,
    HYPERTENSION_2,
    HYPERTENSION_1,
    ELEVATED,
    HYPOTENSION,
    NORMAL,
)

GLUCOSE_LOW = Category('low', 'Low (Hypoglycemia)', '< 70 mg/dL')
GLUCOSE_NORMAL_FASTING = Category('normal_fasting', 'Normal (Fasting)', '70-99 mg/dL')
GLUCOSE_NORMAL_POST_MEAL = Category('normal_post_meal', 'Normal (Post-Meal)', '< 140 mg/dL')
GLUCOSE_ELEVATED_FASTING = Category('elevated', 'Elevated (Prediabetes)', '100-125 mg/dL (Fasting)')
GLUCOSE_ELEVATED_POST_MEAL = Category('elevated', 'Elevated (Prediabetes)', '140-199 mg/dL (Post-Meal/Random)')
GLUCOSE_HIGH_FASTING = Category('high', 'High (Diabetes)', '>= 126 mg/dL (Fasting)')
GLUCOSE_HIGH_POST_MEAL = Category('high', 'High (Diabetes)', '>= 200 mg/dL (Post-Meal/Random)')

GLUCOSE_CATEGORIES = (
    GLUCOSE_NORMAL_FASTING,
    GLUCOSE_NORMAL_POST_MEAL,
    GLUCOSE_ELEVATED_FASTING,
    GLUCOSE_ELEVATED_POST_MEAL,
    GLUCOSE_HIGH_FASTING,
    GLUCOSE_HIGH_POST_MEAL,
    GLUCOSE_LOW,
)


def classify_blood_pressure(systolic: int, diastolic: int) -> Category:
    if systolic > 180 or diastolic > 120:
        return HYPERTENSIVE_CRISIS
    if systolic >= 140 or diastolic >= 90:
        return HYPERTENSION_2
    if systolic >= 130 or diastolic >= 80:
        return HYPERTENSION_1
    if 120 <= systolic <= 129 and diastolic < 80:
        return ELEVATED
    if systolic < 90 or diastolic < 60:
        return HYPOTENSION
    return NORMAL


def classify_glucose(level: int, reading_type: str) -> Category:
    if level < 70:
        return GLUCOSE_LOW
    if reading_type == 'fasting':
        if level < 100:
            return GLUCOSE_NORMAL_FASTING
        if level < 126:
            return GLUCOSE_ELEVATED_FASTING
        return GLUCOSE_HIGH_FASTING
    # post-meal and random share the non-fasting thresholds
    if level < 140:
        return GLUCOSE_NORMAL_POST_MEAL
    if level < 200:
        return GLUCOSE_ELEVATED_POST_MEAL
    return GLUCOSE_HIGH_POST_MEAL
