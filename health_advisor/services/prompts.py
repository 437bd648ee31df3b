"""
AI prompt templates for stool-health advice.

All prompts follow medical ethics guidelines:
- Use qualified language ("may indicate", not "means you have")
- Never diagnose conditions
- Recommend professional consultation for red-flag findings
- Keep advice specific, actionable and calm in tone
"""

import json
from typing import Optional

from health_advisor.services.observation import Observation, UserProfile
from health_advisor.services.scoring import (
    Assessment,
    Trend,
    URGENCY_HIGH,
    get_bristol_description,
)

# =============================================================================
# HEALTH ADVICE (probed model, fastest available)
# =============================================================================

HEALTH_ADVICE_SYSTEM_PROMPT = """You are an expert digestive health AI consultant for a personal stool-tracking application.

TASK: Turn a structured stool observation into personalized, practical health advice in English.

CRITICAL MEDICAL ETHICS:
- Use qualified language: "may indicate" NOT "means you have"
- Never diagnose medical conditions
- Red or black stool, and severe Bristol types 1 or 7, always warrant a recommendation to see a doctor
- Be clear but not panic-inducing for serious findings

OUTPUT FORMAT:
CRITICAL: Return ONLY valid JSON. Do NOT wrap in markdown code blocks (no ```json). Do NOT include any text before or after the JSON object."""

PROBE_PROMPT = "test"

ADVICE_JSON_SHAPE = """{
  "healthStatus": {
    "level": "Choose: excellent/good/attention/warning/critical",
    "summary": "2-3 sentences summarizing current health status, be specific and personalized",
    "score": 0,
    "confidence": 0.85,
    "mainConcern": "Primary concern to address",
    "positiveAspects": "What's going well"
  },
  "dietaryAdvice": {
    "immediateActions": [
      "Immediate dietary adjustment 1 for today",
      "Immediate dietary adjustment 2 for today"
    ],
    "recommendations": [
      "Specific food recommendation (e.g., Add 2 tablespoons of oatmeal to breakfast)",
      "Specific food recommendation (e.g., Have a cup of yogurt after lunch)"
    ],
    "avoidFoods": [
      "Specific foods to avoid and why"
    ],
    "mealPlan": {
      "breakfast": "Breakfast suggestion with specific foods and portions",
      "lunch": "Lunch suggestion with specific foods and portions",
      "dinner": "Dinner suggestion with specific foods and portions",
      "snacks": "Snack suggestions if needed"
    },
    "waterIntake": "Specific water amount (ml) and timing",
    "supplements": [
      {"name": "Probiotics", "dosage": "10 billion CFU", "timing": "After breakfast", "reason": "Improve gut flora"}
    ]
  },
  "lifestyleAdvice": {
    "exercise": {
      "type": "Recommended exercise types (e.g., brisk walking, yoga)",
      "duration": "Duration per session",
      "frequency": "Weekly frequency",
      "bestTime": "Best time to exercise",
      "specific": "Specific movements (e.g., 5-minute clockwise abdominal massage)"
    },
    "toiletHabits": {
      "timing": "Best time for bowel movements",
      "position": "Recommended posture",
      "duration": "Recommended duration",
      "tips": "Specific techniques"
    },
    "stress": {
      "techniques": ["Specific stress reduction method 1", "Specific stress reduction method 2"],
      "dailyPractice": "Daily practice recommendations"
    },
    "sleep": {
      "duration": "Recommended sleep duration",
      "bedtime": "Recommended bedtime",
      "tips": "Specific methods to improve sleep quality"
    }
  },
  "warningSignals": [
    "Warning signals that need immediate attention"
  ],
  "followUp": {
    "nextCheck": "Next check time (e.g., Tomorrow morning, In 3 days)",
    "frequency": "Recording frequency (e.g., Daily in the morning)",
    "expectations": {
      "shortTerm": "Expected improvements in 3 days",
      "mediumTerm": "Expected improvements in 1 week",
      "longTerm": "Expected improvements in 1 month"
    },
    "monitoringPoints": ["Key indicator to monitor"],
    "adjustmentTriggers": ["When to adjust the plan"]
  },
  "personalizedTips": [
    "Very specific personalized tip 1",
    "Very specific personalized tip 2",
    "Very specific personalized tip 3"
  ],
  "motivationalMessage": "Personalized encouraging message",
  "urgencyLevel": "low|medium|high",
  "doctorConsultation": {
    "needed": false,
    "reason": "Reason for medical consultation if needed, otherwise empty",
    "specialty": "Recommended specialty (e.g., Gastroenterology), otherwise empty",
    "preparation": "What to prepare before seeing a doctor, otherwise empty"
  },
  "naturalRemedies": [
    {"name": "Natural remedy name (e.g., Peppermint tea)", "method": "How to use", "frequency": "Frequency of use", "benefit": "Expected benefits"}
  ],
  "preventionStrategies": [
    "Long-term prevention strategy"
  ]
}"""

ADVICE_PRINCIPLES = """Important principles:
1. All recommendations must be specific, actionable, and personalized
2. Include specific amounts, times, and frequencies
3. Adjust tone based on severity (clear but not panic-inducing for serious cases)
4. Consider the user's personal situation and historical trends
5. Provide immediately actionable items
6. Balance professionalism with understandability
7. Give positive encouragement while remaining realistic"""


def _format_color_warnings(assessment: Assessment) -> str:
    if not assessment.color_warnings:
        return "- None detected"
    lines = []
    for warning in assessment.color_warnings:
        line = (
            f"- {warning.color}: {warning.percentage:g}% of sample, status {warning.status}, "
            f"severity {warning.severity}"
        )
        if warning.description:
            line += f" ({warning.description})"
        lines.append(line)
    return "\n".join(lines)


def _format_volume_issues(assessment: Assessment) -> str:
    if not assessment.volume_issues:
        return "- None detected"
    lines = []
    for issue in assessment.volume_issues:
        score = f"{issue.score:g}" if issue.score is not None else "n/a"
        lines.append(
            f"- {issue.issue} (score {score}): {'; '.join(issue.implications)}"
        )
    return "\n".join(lines)


def _format_user_profile(profile: UserProfile) -> str:
    return (
        "👤 **User Profile**:\n"
        f"- Age: {profile.age or 'Unknown'}\n"
        f"- Gender: {profile.gender or 'Unknown'}\n"
        f"- Diet Type: {profile.diet or 'Regular'}\n"
        f"- Exercise Frequency: {profile.exercise or 'Moderate'}\n"
        f"- Medical History: {profile.conditions or 'None'}\n"
        f"- Allergies: {profile.allergies or 'None'}"
    )


def _format_trend(trend: Trend) -> str:
    return (
        "📈 **Trend Analysis**:\n"
        f"- {trend.record_count}-Record Average: Type {trend.average}\n"
        f"- Trend Direction: {trend.direction}\n"
        f"- Change Rate: {trend.change_rate}\n"
        f"- Priority: {trend.priority}"
    )


def build_health_advice_prompt(
    observation: Observation, assessment: Assessment
) -> str:
    """
    Build the user prompt for the AI model.

    Embeds exactly the values the fallback generator would use (score,
    urgency, warnings, concerns) so AI and fallback documents agree.
    """
    doctor_needed = assessment.urgency == URGENCY_HIGH or any(
        warning.is_critical for warning in assessment.color_warnings
    )

    if assessment.specific_concerns:
        concerns = "\n".join(f"- {concern}" for concern in assessment.specific_concerns)
    else:
        concerns = "- None beyond routine monitoring"

    sections = [
        "Please provide personalized digestive health recommendations in English.",
        "📊 **Current Analysis Results**:\n"
        f"- Bristol Stool Scale Type: {assessment.bristol_type} "
        f"{get_bristol_description(assessment.bristol_type)}\n"
        f"- Health Score: {assessment.health_score}/100\n"
        f"- Urgency Level: {assessment.urgency}",
        f"🎨 **Color Warnings**:\n{_format_color_warnings(assessment)}",
        f"📦 **Volume Issues**:\n{_format_volume_issues(assessment)}",
        f"⚠️ **Specific Concerns**:\n{concerns}",
    ]

    profile: Optional[UserProfile] = observation.user_profile
    if profile is not None:
        sections.append(_format_user_profile(profile))
    if assessment.trend is not None:
        sections.append(_format_trend(assessment.trend))

    sections.append(
        "Please provide comprehensive health advice in the following JSON structure:\n\n"
        + ADVICE_JSON_SHAPE
    )
    sections.append(
        "Use these computed values exactly: "
        f'"score": {assessment.health_score}, '
        f'"urgencyLevel": {json.dumps(assessment.urgency)}, '
        f'"doctorConsultation.needed": {json.dumps(doctor_needed)}.'
    )
    sections.append(ADVICE_PRINCIPLES)

    return "\n\n".join(sections)
