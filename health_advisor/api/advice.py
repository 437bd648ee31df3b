"""Health advice API endpoints."""
import logging

from fastapi import APIRouter, Body, Depends

from health_advisor.config import settings
from health_advisor.services.advice_service import (
    AdviceService,
    RateLimitExceededError,
    build_quick_advice_response,
    check_configuration,
    utc_timestamp,
)
from health_advisor.services.ai_gateway import ModelGateway, get_model_gateway
from health_advisor.services.observation import parse_bristol_type, parse_observation
from health_advisor.services.rate_limit import RequestCounter, get_request_counter

logger = logging.getLogger(__name__)

router = APIRouter(tags=["advice"])

FEATURES = [
    "Personalized Health Analysis",
    "AI-Powered Recommendations (Claude)",
    "Trend Analysis",
    "Stool Color and Volume Anomaly Detection",
    "Emergency Detection",
]


def get_advice_service(
    gateway: ModelGateway = Depends(get_model_gateway),
) -> AdviceService:
    return AdviceService(gateway)


@router.get("/")
async def service_banner(gateway: ModelGateway = Depends(get_model_gateway)):
    """Liveness banner with the currently cached model."""
    return {
        "message": "Health Advisor AI API is running!",
        "status": "healthy",
        "timestamp": utc_timestamp(),
        "version": settings.api_version,
        "currentModel": gateway.current_model or "not initialized",
        "features": FEATURES,
    }


@router.post("/api/health-advice")
async def health_advice(
    payload: dict = Body(...),
    counter: RequestCounter = Depends(get_request_counter),
    service: AdviceService = Depends(get_advice_service),
):
    """
    Full advice for one observation.

    Checks run in order: input validation (400), credentials (500),
    rate limit (429). After that the response is always 200, from the AI
    or from the deterministic fallback.
    """
    observation = parse_observation(payload)
    check_configuration()

    if not counter.try_acquire():
        raise RateLimitExceededError(
            "Too many requests, please try again later",
            retry_after=int(counter.window_seconds),
        )

    logger.info(
        "Health advice request: Bristol Type %d, %d colors, volume=%s",
        observation.bristol_type,
        len(observation.colors),
        observation.volume.volume_class if observation.volume else None,
    )
    return await service.generate_health_advice(observation)


@router.post("/api/quick-advice")
async def quick_advice(payload: dict = Body(...)):
    """One-line tip for a Bristol type. Never calls the AI."""
    bristol_type = parse_bristol_type(payload.get("bristolType"))
    return build_quick_advice_response(bristol_type)
