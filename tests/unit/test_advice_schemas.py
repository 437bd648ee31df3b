"""
Unit tests for AdviceDocument schema validation.

The AI's JSON must match the exact shape the fallback produces; anything
missing or mistyped is rejected.
"""
import pytest
from pydantic import ValidationError

from health_advisor.services.advice_schemas import (
    REQUIRED_ADVICE_KEYS,
    AdviceDocument,
)
from tests.fixtures.mocks import sample_ai_advice


class TestAdviceDocument:
    """Tests for AdviceDocument validation."""

    def test_valid_camel_case_document(self):
        document = AdviceDocument.model_validate(sample_ai_advice())

        assert document.health_status.summary == "AI generated summary"
        assert document.metadata is None

    def test_dump_uses_camel_case(self):
        data = AdviceDocument.model_validate(sample_ai_advice()).model_dump(by_alias=True)

        assert list(data)[: len(REQUIRED_ADVICE_KEYS)] == list(REQUIRED_ADVICE_KEYS)
        assert "mainConcern" in data["healthStatus"]
        assert "shortTerm" in data["followUp"]["expectations"]

    @pytest.mark.parametrize("missing", REQUIRED_ADVICE_KEYS)
    def test_missing_section_rejected(self, missing):
        data = sample_ai_advice()
        del data[missing]

        with pytest.raises(ValidationError):
            AdviceDocument.model_validate(data)

    def test_invalid_level_rejected(self):
        data = sample_ai_advice()
        data["healthStatus"]["level"] = "fine"

        with pytest.raises(ValidationError):
            AdviceDocument.model_validate(data)

    def test_out_of_range_score_rejected(self):
        data = sample_ai_advice()
        data["healthStatus"]["score"] = 140

        with pytest.raises(ValidationError):
            AdviceDocument.model_validate(data)

    def test_invalid_urgency_rejected(self):
        with pytest.raises(ValidationError):
            AdviceDocument.model_validate(sample_ai_advice(urgencyLevel="severe"))

    def test_wrongly_typed_list_rejected(self):
        with pytest.raises(ValidationError):
            AdviceDocument.model_validate(sample_ai_advice(warningSignals="none"))

    def test_incomplete_supplement_rejected(self):
        data = sample_ai_advice()
        data["dietaryAdvice"]["supplements"] = [{"name": "Probiotics"}]

        with pytest.raises(ValidationError):
            AdviceDocument.model_validate(data)
