"""
Pydantic models for the AdviceDocument.

The same schema validates the JSON returned by the AI model and wraps the
output of the deterministic fallback generator, so both paths produce the
exact same shape. Field names are snake_case in Python and camelCase on the
wire (``model_dump(by_alias=True)``).
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Health status ---


class HealthStatusSchema(CamelSchema):
    level: Literal["excellent", "good", "attention", "warning", "critical"]
    summary: str
    score: int = Field(ge=0, le=100)
    confidence: float = Field(ge=0, le=1)
    main_concern: str
    positive_aspects: str


# --- Dietary advice ---


class MealPlanSchema(CamelSchema):
    breakfast: str
    lunch: str
    dinner: str
    snacks: str


class SupplementSchema(CamelSchema):
    name: str
    dosage: str
    timing: str
    reason: str


class DietaryAdviceSchema(CamelSchema):
    immediate_actions: list[str]
    recommendations: list[str]
    avoid_foods: list[str]
    meal_plan: MealPlanSchema
    water_intake: str
    supplements: list[SupplementSchema]


# --- Lifestyle advice ---


class ExerciseSchema(CamelSchema):
    type: str
    duration: str
    frequency: str
    best_time: str
    specific: str


class ToiletHabitsSchema(CamelSchema):
    timing: str
    position: str
    duration: str
    tips: str


class StressSchema(CamelSchema):
    techniques: list[str]
    daily_practice: str


class SleepSchema(CamelSchema):
    duration: str
    bedtime: str
    tips: str


class LifestyleAdviceSchema(CamelSchema):
    exercise: ExerciseSchema
    toilet_habits: ToiletHabitsSchema
    stress: StressSchema
    sleep: SleepSchema


# --- Follow-up ---


class ExpectationsSchema(CamelSchema):
    short_term: str
    medium_term: str
    long_term: str


class FollowUpSchema(CamelSchema):
    next_check: str
    frequency: str
    expectations: ExpectationsSchema
    monitoring_points: list[str]
    adjustment_triggers: list[str]


# --- Medical escalation / remedies ---


class DoctorConsultationSchema(CamelSchema):
    needed: bool
    reason: str
    specialty: str
    preparation: str


class NaturalRemedySchema(CamelSchema):
    name: str
    method: str
    frequency: str
    benefit: str


# --- Metadata (attached by the service, never requested from the AI) ---


class AnomalyCountsSchema(CamelSchema):
    color_warnings: int = 0
    volume_issues: int = 0


class AdviceMetadataSchema(CamelSchema):
    generated_at: str
    model: str
    request_id: str
    version: str
    response_time: Optional[int] = None
    source: Literal["ai", "fallback"]
    anomaly_counts: AnomalyCountsSchema


# --- Full document ---


class AdviceDocument(CamelSchema):
    health_status: HealthStatusSchema
    dietary_advice: DietaryAdviceSchema
    lifestyle_advice: LifestyleAdviceSchema
    warning_signals: list[str]
    follow_up: FollowUpSchema
    personalized_tips: list[str]
    motivational_message: str
    urgency_level: Literal["low", "medium", "high"]
    doctor_consultation: DoctorConsultationSchema
    natural_remedies: list[NaturalRemedySchema]
    prevention_strategies: list[str]
    metadata: Optional[AdviceMetadataSchema] = None


REQUIRED_ADVICE_KEYS = (
    "healthStatus",
    "dietaryAdvice",
    "lifestyleAdvice",
    "warningSignals",
    "followUp",
    "personalizedTips",
    "motivationalMessage",
    "urgencyLevel",
    "doctorConsultation",
    "naturalRemedies",
    "preventionStrategies",
)
