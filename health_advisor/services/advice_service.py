"""
Advice orchestration: AI first, deterministic fallback always available.

Once a request has passed validation, configuration and rate checks, this
service always produces a well-formed AdviceDocument. Gateway failures,
timeouts, unparseable or wrongly-shaped AI output and unexpected errors on
the AI path all degrade to the rule-table generator.
"""

import json
import logging
import re
import time
import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError

from health_advisor.config import settings
from health_advisor.services.advice_schemas import (
    AdviceDocument,
    AdviceMetadataSchema,
    AnomalyCountsSchema,
)
from health_advisor.services.ai_gateway import (
    AIGatewayError,
    ModelGateway,
    _fix_trailing_commas,
    _strip_markdown_json,
)
from health_advisor.services.fallback_advice import (
    FALLBACK_CONFIDENCE,
    doctor_consultation,
    generate_advice,
    generate_quick_advice,
    health_level,
)
from health_advisor.services.observation import Observation
from health_advisor.services.prompts import (
    HEALTH_ADVICE_SYSTEM_PROMPT,
    build_health_advice_prompt,
)
from health_advisor.services.scoring import (
    URGENCY_HIGH,
    Assessment,
    assess_observation,
)

logger = logging.getLogger(__name__)

FALLBACK_MODEL_NAME = "fallback"
FALLBACK_NOTE = "Using fallback advice due to AI service issue"

# First "{" to last "}" (greedy)
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def generate_request_id() -> str:
    return f"req_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def parse_advice_document(text: str) -> AdviceDocument:
    """
    Locate the JSON object in an AI response and validate it.

    A document missing any required section, or with wrongly-typed fields,
    is rejected outright rather than accepted partially.

    Raises:
        AdviceParseError: no JSON object, invalid JSON or schema mismatch
    """
    match = _JSON_OBJECT_RE.search(_strip_markdown_json(text))
    if not match:
        raise AdviceParseError("Cannot extract JSON from AI response")

    try:
        parsed = json.loads(_fix_trailing_commas(match.group(0)))
    except json.JSONDecodeError as e:
        raise AdviceParseError(f"AI response is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise AdviceParseError("AI response JSON is not an object")
    # Metadata is always stamped server-side
    parsed.pop("metadata", None)

    try:
        return AdviceDocument.model_validate(parsed)
    except ValidationError as e:
        raise AdviceParseError(f"AI response failed schema validation: {e}") from e


def align_with_assessment(
    document: AdviceDocument, bristol_type: int, assessment: Assessment
) -> AdviceDocument:
    """
    Stamp computed score, level, urgency and doctor flag onto an AI document.

    When a doctor visit is needed but the AI left the reason blank, the
    reason, specialty and preparation come from the rule tables.
    """
    document.health_status.score = assessment.health_score
    document.health_status.level = health_level(bristol_type, assessment.color_warnings)
    document.urgency_level = assessment.urgency

    consultation = document.doctor_consultation
    consultation.needed = assessment.urgency == URGENCY_HIGH or any(
        warning.is_critical for warning in assessment.color_warnings
    )
    if consultation.needed and not consultation.reason.strip():
        computed = doctor_consultation(bristol_type, assessment.urgency, assessment.color_warnings)
        consultation.reason = computed["reason"]
        consultation.specialty = computed["specialty"]
        consultation.preparation = consultation.preparation or computed["preparation"]
    return document


def build_metadata(
    model: str, source: str, assessment: Assessment, response_time: Optional[int]
) -> AdviceMetadataSchema:
    return AdviceMetadataSchema(
        generated_at=utc_timestamp(),
        model=model,
        request_id=generate_request_id(),
        version=settings.api_version,
        response_time=response_time,
        source=source,
        anomaly_counts=AnomalyCountsSchema(
            color_warnings=len(assessment.color_warnings),
            volume_issues=len(assessment.volume_issues),
        ),
    )


def check_configuration() -> None:
    """
    Raises:
        ConfigurationError: no Anthropic API key configured
    """
    if not settings.anthropic_api_key:
        raise ConfigurationError("API Key not configured")


class AdviceService:
    """Generates advice for one observation per call."""

    def __init__(self, gateway: ModelGateway):
        self.gateway = gateway

    def _fallback_response(
        self, observation: Observation, assessment: Assessment, started: float
    ) -> dict:
        document = generate_advice(
            observation.bristol_type,
            assessment.color_warnings,
            assessment.volume_issues,
            observation.user_profile,
        )
        response_time = int((time.perf_counter() - started) * 1000)
        document.metadata = build_metadata(
            FALLBACK_MODEL_NAME, "fallback", assessment, response_time
        )
        return {
            "success": True,
            "advice": document.model_dump(by_alias=True),
            "model": FALLBACK_MODEL_NAME,
            "timestamp": utc_timestamp(),
            "confidence": FALLBACK_CONFIDENCE,
            "responseTime": response_time,
            "note": FALLBACK_NOTE,
        }

    async def generate_health_advice(self, observation: Observation) -> dict:
        """
        Produce the response body for /api/health-advice.

        Args:
            observation: Validated, normalized observation

        Returns:
            Response dict with success, advice, model, timestamp,
            confidence and responseTime (plus note on fallback)
        """
        assessment = assess_observation(observation)
        started = time.perf_counter()

        try:
            model_name = await self.gateway.ensure_ready()
            logger.info(
                "Using model %s for health advice (Bristol Type %d)",
                model_name,
                observation.bristol_type,
            )
            prompt = build_health_advice_prompt(observation, assessment)
            text = await self.gateway.generate(prompt, system=HEALTH_ADVICE_SYSTEM_PROMPT)
            document = parse_advice_document(text)
        except (AIGatewayError, AdviceParseError) as e:
            logger.warning("Using fallback advice: %s", e)
            return self._fallback_response(observation, assessment, started)
        except Exception:
            logger.exception("Unexpected error on AI path, using fallback advice")
            return self._fallback_response(observation, assessment, started)

        response_time = int((time.perf_counter() - started) * 1000)
        logger.info("AI response completed in %dms", response_time)

        document = align_with_assessment(document, observation.bristol_type, assessment)
        document.metadata = build_metadata(model_name, "ai", assessment, response_time)

        return {
            "success": True,
            "advice": document.model_dump(by_alias=True),
            "model": model_name,
            "timestamp": utc_timestamp(),
            "confidence": assessment.confidence,
            "responseTime": response_time,
        }


def build_quick_advice_response(bristol_type: int) -> dict:
    return {
        "success": True,
        "advice": generate_quick_advice(bristol_type),
        "type": "quick",
        "timestamp": utc_timestamp(),
    }


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================


class ConfigurationError(Exception):
    """Required AI credentials are not configured."""

    pass


class RateLimitExceededError(Exception):
    """Too many advice requests in the current window."""

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after


class AdviceParseError(Exception):
    """AI output could not be located, parsed or validated as an AdviceDocument."""

    pass
