"""
Deterministic, fully offline advice generation.

This is the safety net behind the AI path: for any Bristol type 1-7 and any
combination of color warnings, volume issues and user profile it returns a
complete AdviceDocument built from the tables in advice_tables.py.
"""

import re
from typing import Optional, Sequence

from health_advisor.services import advice_tables as tables
from health_advisor.services.advice_schemas import AdviceDocument
from health_advisor.services.observation import (
    BRISTOL_TYPES,
    InvalidBristolTypeError,
    UserProfile,
)
from health_advisor.services.scoring import (
    BLEEDING_COLORS,
    MAIN_CONCERNS,
    URGENCY_HIGH,
    ColorWarning,
    VolumeIssue,
    assess_urgency,
    build_specific_concerns,
    compute_health_score,
    get_bristol_description,
)

FALLBACK_CONFIDENCE = 0.7
MAX_PERSONALIZED_TIPS = 3


def _color_concern(warning: ColorWarning) -> str:
    concern = f"{warning.color} stool color detected ({warning.percentage:g}%, {warning.status})"
    if warning.is_critical:
        concern += ", possible gastrointestinal bleeding"
    return concern


def health_level(bristol_type: int, color_warnings: Sequence[ColorWarning]) -> str:
    if any(warning.is_critical for warning in color_warnings):
        return "critical"
    return tables.HEALTH_LEVELS[bristol_type]


def _has_bleeding_color(color_warnings: Sequence[ColorWarning]) -> bool:
    return any(warning.color in BLEEDING_COLORS for warning in color_warnings)


def _dietary_recommendations(
    bristol_type: int,
    color_warnings: Sequence[ColorWarning],
    volume_issues: Sequence[VolumeIssue],
) -> list[str]:
    recommendations = list(tables.ADVICE_TEMPLATES[bristol_type].diet)
    for warning in color_warnings:
        advice = tables.COLOR_ADVICE.get(warning.color)
        if advice is None:
            advice = tables.GENERIC_COLOR_ADVICE.format(color=warning.color.lower())
        recommendations.append(advice)
    for issue in volume_issues:
        recommendations.append(tables.VOLUME_ADVICE[issue.volume_class])
    return recommendations


def _avoid_foods(bristol_type: int, color_warnings: Sequence[ColorWarning]) -> list[str]:
    foods = list(tables.AVOID_FOODS[bristol_type])
    for warning in color_warnings:
        foods.extend(tables.COLOR_AVOID_FOODS.get(warning.color, ()))
    # Red and Black both add the iron warning
    return list(dict.fromkeys(foods))


def _water_intake(bristol_type: int, volume_issues: Sequence[VolumeIssue]) -> str:
    intake = tables.WATER_INTAKE[bristol_type]
    if any(issue.volume_class == "small" for issue in volume_issues):
        intake += " (add an extra 500ml because stool volume is small)"
    return intake


def _supplements(bristol_type: int, color_warnings: Sequence[ColorWarning]) -> list[dict]:
    supplements = [dict(item) for item in tables.SUPPLEMENTS[bristol_type]]
    # No baseline table recommends iron, so the advisory never contradicts it
    if _has_bleeding_color(color_warnings):
        supplements.append(dict(tables.IRON_AVOIDANCE_SUPPLEMENT))
    return supplements


def _lifestyle_advice(bristol_type: int) -> dict:
    plan = tables.LIFESTYLE_PLANS[bristol_type]
    return {
        "exercise": {
            "type": plan.exercise_type,
            "duration": plan.exercise_duration,
            "frequency": plan.exercise_frequency,
            "best_time": plan.exercise_best_time,
            "specific": tables.ADVICE_TEMPLATES[bristol_type].lifestyle,
        },
        "toilet_habits": {
            "timing": plan.toilet_timing,
            "position": plan.toilet_position,
            "duration": plan.toilet_duration,
            "tips": plan.toilet_tips,
        },
        "stress": {
            "techniques": list(plan.stress_techniques),
            "daily_practice": plan.stress_daily_practice,
        },
        "sleep": {
            "duration": plan.sleep_duration,
            "bedtime": plan.sleep_bedtime,
            "tips": plan.sleep_tips,
        },
    }


def _age_bracket(age: Optional[str]) -> Optional[str]:
    if not age:
        return None
    match = re.search(r"\d+", age)
    if not match:
        return None
    years = int(match.group())
    if years < 30:
        return "under_30"
    if years < 50:
        return "30_to_50"
    return "50_plus"


def _diet_key(diet: Optional[str]) -> Optional[str]:
    if not diet:
        return None
    key = diet.strip().lower()
    return key if key in tables.DIET_TIPS else "other"


def _exercise_key(exercise: Optional[str]) -> Optional[str]:
    if not exercise:
        return None
    key = exercise.strip().lower()
    return key if key in tables.EXERCISE_TIPS else None


def personalized_tips(bristol_type: int, user_profile: Optional[UserProfile]) -> list[str]:
    """
    Up to three tips from the profile's age, diet and exercise level.

    Each fragment has a constipation-leaning variant (type <= 3) and a
    loose-leaning variant (type > 3). Falls back to the per-type tip list when
    there is no profile or none of its fields select a fragment.
    """
    if user_profile is None:
        return list(tables.DEFAULT_TIPS[bristol_type])

    variant = 0 if bristol_type <= 3 else 1
    tips = []

    age_bracket = _age_bracket(user_profile.age)
    if age_bracket:
        tips.append(tables.AGE_TIPS[age_bracket][variant])

    diet_key = _diet_key(user_profile.diet)
    if diet_key:
        tips.append(tables.DIET_TIPS[diet_key][variant])

    exercise_key = _exercise_key(user_profile.exercise)
    if exercise_key:
        tips.append(tables.EXERCISE_TIPS[exercise_key][variant])

    if not tips:
        return list(tables.DEFAULT_TIPS[bristol_type])
    return tips[:MAX_PERSONALIZED_TIPS]


def _follow_up(
    bristol_type: int, urgency: str, color_warnings: Sequence[ColorWarning]
) -> dict:
    expectations = dict(tables.EXPECTATIONS[bristol_type])
    monitoring_points = list(tables.MONITORING_POINTS[bristol_type])
    adjustment_triggers = list(tables.ADJUSTMENT_TRIGGERS[bristol_type])

    if color_warnings:
        expectations["mediumTerm"] += ", with stool color returning to normal brown"
    for warning in color_warnings:
        monitoring_points.append(
            f"{warning.color} coloration: whether it persists beyond 48 hours"
        )
        adjustment_triggers.append(f"{warning.color} coloration persists or worsens")

    return {
        "next_check": "Tomorrow morning" if urgency == URGENCY_HIGH else tables.NEXT_CHECK[bristol_type],
        "frequency": "Daily recording",
        "expectations": {
            "short_term": expectations["shortTerm"],
            "medium_term": expectations["mediumTerm"],
            "long_term": expectations["longTerm"],
        },
        "monitoring_points": monitoring_points,
        "adjustment_triggers": adjustment_triggers,
    }


def motivational_message(health_score: int, specific_concerns: Sequence[str]) -> str:
    lead = specific_concerns[0] if specific_concerns else None

    if health_score > 80:
        return "Excellent! Your digestive health is in great shape. Keep it up! 🌟"
    if health_score > 60:
        if lead:
            return (
                f"You're doing well! Working on one point ({lead}) will get you "
                "to optimal health. You've got this! 💪"
            )
        return (
            "You're doing well! Just a few adjustments will get you to optimal "
            "health. You've got this! 💪"
        )
    if health_score > 40:
        if lead:
            return (
                f"Don't worry, start with the most important point ({lead}) and "
                "these recommendations will lead to improvement soon. Stay positive! 🌈"
            )
        return (
            "Don't worry, following these recommendations will lead to "
            "improvement soon. Stay positive! 🌈"
        )
    if lead:
        return (
            f"Your health needs attention, starting with this: {lead}. Remember, "
            "it's never too late to start improving. We're here to help! ❤️"
        )
    return (
        "Your health needs attention, but remember - it's never too late to "
        "start improving. We're here to help! ❤️"
    )


def doctor_consultation(
    bristol_type: int, urgency: str, color_warnings: Sequence[ColorWarning]
) -> dict:
    critical = [warning for warning in color_warnings if warning.is_critical]

    if critical:
        colors = " and ".join(dict.fromkeys(warning.color for warning in critical))
        specialty = "Gastroenterology"
        if _has_bleeding_color(critical):
            specialty = "Gastroenterology - URGENT"
        return {
            "needed": True,
            "reason": (
                f"{colors} stool color may indicate gastrointestinal bleeding "
                "and needs prompt medical evaluation"
            ),
            "specialty": specialty,
            "preparation": (
                "Note when the color first appeared, any iron supplements, bismuth "
                "medicines or dark foods taken, and bring a photo of the stool"
            ),
        }

    if urgency == URGENCY_HIGH:
        return {
            "needed": True,
            "reason": f"Bristol Type {bristol_type} symptoms require professional evaluation",
            "specialty": "Gastroenterology",
            "preparation": "Document symptom frequency, fluid intake and a 3-day food diary",
        }

    return {"needed": False, "reason": "", "specialty": "", "preparation": ""}


def _natural_remedies(bristol_type: int, color_warnings: Sequence[ColorWarning]) -> list[dict]:
    remedies = [dict(item) for item in tables.NATURAL_REMEDIES[bristol_type]]
    if any(warning.color == "Green" for warning in color_warnings):
        remedies.append(dict(tables.GINGER_TEA_REMEDY))
    return remedies


def _prevention_strategies(
    bristol_type: int,
    color_warnings: Sequence[ColorWarning],
    volume_issues: Sequence[VolumeIssue],
) -> list[str]:
    if bristol_type <= 3:
        strategies = list(tables.CONSTIPATION_PREVENTION)
    elif bristol_type >= 5:
        strategies = list(tables.LOOSE_STOOL_PREVENTION)
    else:
        strategies = list(tables.GENERAL_PREVENTION)

    for warning in color_warnings:
        strategies.append(
            f"Check stool color regularly and report recurring "
            f"{warning.color.lower()} coloration to your doctor"
        )
    for issue in volume_issues:
        strategies.append(
            f"Keep portions and fiber intake consistent to normalize "
            f"{issue.volume_class} stool volume"
        )
    return strategies


def generate_advice(
    bristol_type: int,
    color_warnings: Sequence[ColorWarning] = (),
    volume_issues: Sequence[VolumeIssue] = (),
    user_profile: Optional[UserProfile] = None,
) -> AdviceDocument:
    """
    Build a complete AdviceDocument without any external call.

    Args:
        bristol_type: Validated Bristol type (1-7)
        color_warnings: Derived color warnings, in source order
        volume_issues: Derived volume issues
        user_profile: Optional personalization context

    Returns:
        AdviceDocument without metadata (the caller stamps it)

    Raises:
        InvalidBristolTypeError: if bristol_type is outside 1-7
    """
    if bristol_type not in BRISTOL_TYPES:
        raise InvalidBristolTypeError("Please provide valid Bristol type (1-7)")

    health_score = compute_health_score(bristol_type, color_warnings, volume_issues)
    urgency = assess_urgency(bristol_type, color_warnings)
    specific_concerns = build_specific_concerns(bristol_type, color_warnings, volume_issues)
    template = tables.ADVICE_TEMPLATES[bristol_type]

    if color_warnings:
        main_concern = _color_concern(color_warnings[0])
    else:
        main_concern = MAIN_CONCERNS[bristol_type]

    summary = (
        f"Based on your results (Bristol Type {bristol_type}: "
        f"{get_bristol_description(bristol_type)}), the main concern is: "
        f"{main_concern}. Your digestive health score is {health_score}/100."
    )

    return AdviceDocument.model_validate(
        {
            "health_status": {
                "level": health_level(bristol_type, color_warnings),
                "summary": summary,
                "score": health_score,
                "confidence": FALLBACK_CONFIDENCE,
                "main_concern": main_concern,
                "positive_aspects": (
                    "Digestive system functioning normally"
                    if health_score > 60
                    else "Taking steps toward better health"
                ),
            },
            "dietary_advice": {
                "immediate_actions": list(template.diet[:2]),
                "recommendations": _dietary_recommendations(
                    bristol_type, color_warnings, volume_issues
                ),
                "avoid_foods": _avoid_foods(bristol_type, color_warnings),
                "meal_plan": dict(tables.MEAL_PLANS[bristol_type]),
                "water_intake": _water_intake(bristol_type, volume_issues),
                "supplements": _supplements(bristol_type, color_warnings),
            },
            "lifestyle_advice": _lifestyle_advice(bristol_type),
            "warning_signals": list(template.warnings),
            "follow_up": _follow_up(bristol_type, urgency, color_warnings),
            "personalized_tips": personalized_tips(bristol_type, user_profile),
            "motivational_message": motivational_message(health_score, specific_concerns),
            "urgency_level": urgency,
            "doctor_consultation": doctor_consultation(bristol_type, urgency, color_warnings),
            "natural_remedies": _natural_remedies(bristol_type, color_warnings),
            "prevention_strategies": _prevention_strategies(
                bristol_type, color_warnings, volume_issues
            ),
        }
    )


def generate_quick_advice(bristol_type: int) -> dict:
    """One-line advice for a Bristol type. Never calls the AI."""
    if bristol_type not in BRISTOL_TYPES:
        raise InvalidBristolTypeError("Please provide valid Bristol type (1-7)")
    return {
        "quickTip": tables.QUICK_TIPS[bristol_type],
        "urgency": assess_urgency(bristol_type),
        "action": tables.IMMEDIATE_ACTIONS[bristol_type],
    }
