"""
Unit tests for prompt synthesis.

The prompt must carry the same computed values the fallback generator uses.
"""
import json

from health_advisor.services.advice_schemas import REQUIRED_ADVICE_KEYS
from health_advisor.services.observation import parse_observation
from health_advisor.services.prompts import (
    ADVICE_JSON_SHAPE,
    HEALTH_ADVICE_SYSTEM_PROMPT,
    build_health_advice_prompt,
)
from health_advisor.services.scoring import assess_observation


def build(payload: dict) -> str:
    observation = parse_observation(payload)
    return build_health_advice_prompt(observation, assess_observation(observation))


class TestAdviceJsonShape:
    """The embedded template is valid JSON with every required section."""

    def test_shape_is_valid_json(self):
        shape = json.loads(ADVICE_JSON_SHAPE)
        for key in REQUIRED_ADVICE_KEYS:
            assert key in shape

    def test_system_prompt_demands_json_only(self):
        assert "Return ONLY valid JSON" in HEALTH_ADVICE_SYSTEM_PROMPT


class TestBuildHealthAdvicePrompt:
    """Tests for build_health_advice_prompt."""

    def test_minimal_observation(self):
        prompt = build({"bristolType": 4})

        assert "Bristol Stool Scale Type: 4" in prompt
        assert "Health Score: 100/100" in prompt
        assert "Urgency Level: low" in prompt
        assert '"doctorConsultation.needed": false' in prompt
        assert "User Profile" not in prompt
        assert "Trend Analysis" not in prompt

    def test_color_and_volume_anomalies(self):
        prompt = build(
            {
                "bristolType": 4,
                "colorAnalysis": {
                    "summary": {"red": {"status": "Alert", "percentage": 45, "description": "bright red"}}
                },
                "volumeAnalysis": {"overall_volume_class": "small", "volume_score": 18},
            }
        )

        assert "- Red: 45% of sample, status Alert, severity critical (bright red)" in prompt
        assert "Small stool volume (score 18)" in prompt
        assert "URGENT: Red stool detected (45%)" in prompt
        assert '"score": 45' in prompt
        assert '"urgencyLevel": "high"' in prompt
        assert '"doctorConsultation.needed": true' in prompt

    def test_profile_and_trend_sections(self):
        prompt = build(
            {
                "bristolType": 2,
                "userProfile": {"age": "33", "dietType": "vegan"},
                "previousRecords": [{"type": 4}, {"type": 4}, {"type": 2}, {"type": 2}],
            }
        )

        assert "- Age: 33" in prompt
        assert "- Diet Type: vegan" in prompt
        assert "- Allergies: None" in prompt
        assert "4-Record Average: Type 3.0" in prompt
        assert "Trend Direction: Improving" in prompt

    def test_no_anomalies_listed_as_none(self):
        prompt = build({"bristolType": 3})
        assert "🎨 **Color Warnings**:\n- None detected" in prompt
        assert "📦 **Volume Issues**:\n- None detected" in prompt
