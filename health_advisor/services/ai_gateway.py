"""
Claude AI gateway with model probing and a process-wide model cache.

The gateway walks a prioritized list of model identifiers, sends each a
minimal test message bounded by a short timeout, and caches the first one
that answers. Generation failures that look like a timeout or a missing model
clear the cache so the next request probes again.

States: uninitialized -> probing -> ready | failed. A failed probe run is
never cached; the next call starts probing from the top of the list.
"""

import asyncio
import logging
import re
from typing import Optional

import anthropic
import httpx
from anthropic import AsyncAnthropic

from health_advisor.config import settings
from health_advisor.services.prompts import PROBE_PROMPT

logger = logging.getLogger(__name__)

STATE_UNINITIALIZED = "uninitialized"
STATE_PROBING = "probing"
STATE_READY = "ready"
STATE_FAILED = "failed"


def _strip_markdown_json(text: str) -> str:
    """Strip markdown code block wrappers from JSON text."""
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0].strip()
    elif "```" in text:
        text = text.split("```")[1].split("```")[0].strip()
    return text


def _fix_trailing_commas(text: str) -> str:
    """Fix trailing commas in JSON (common LLM error)."""
    text = re.sub(r",\s*}", "}", text)
    text = re.sub(r",\s*]", "]", text)
    return text


def _response_text(response) -> str:
    """Concatenate every text block of a Messages API response."""
    text = ""
    for block in response.content:
        if hasattr(block, "text"):
            text += block.text
    return text


def _looks_like_timeout(message: str) -> bool:
    return "timeout" in message or "timed out" in message


def _looks_like_not_found(message: str) -> bool:
    return "404" in message or "not found" in message or "not_found" in message


class ModelGateway:
    """Probes, caches and calls the first available Claude model."""

    def __init__(
        self,
        model_priority: Optional[list[str]] = None,
        probe_timeout: Optional[float] = None,
        generation_timeout: Optional[float] = None,
        client: Optional[AsyncAnthropic] = None,
    ):
        self.model_priority = list(model_priority or settings.model_priority)
        self.probe_timeout = (
            probe_timeout if probe_timeout is not None else settings.probe_timeout
        )
        self.generation_timeout = (
            generation_timeout
            if generation_timeout is not None
            else settings.generation_timeout
        )
        self._client = client
        self._model_name: Optional[str] = None
        self._state = STATE_UNINITIALIZED
        # Single-flight probing: concurrent first requests wait for one probe run
        self._probe_lock = asyncio.Lock()

    @property
    def client(self) -> AsyncAnthropic:
        if self._client is None:
            timeout = httpx.Timeout(
                timeout=self.generation_timeout,
                connect=settings.anthropic_connect_timeout,
            )
            self._client = AsyncAnthropic(
                api_key=settings.anthropic_api_key, timeout=timeout, max_retries=0
            )
        return self._client

    @property
    def state(self) -> str:
        return self._state

    @property
    def current_model(self) -> Optional[str]:
        return self._model_name

    def invalidate(self, reason: str = "") -> None:
        """Drop the cached model so the next request re-probes."""
        if self._model_name is not None:
            logger.info(
                "Clearing cached model %s (%s)", self._model_name, reason or "manual"
            )
        self._model_name = None
        self._state = STATE_UNINITIALIZED

    async def _probe(self, model_name: str) -> None:
        await asyncio.wait_for(
            self.client.messages.create(
                model=model_name,
                max_tokens=settings.probe_max_tokens,
                messages=[{"role": "user", "content": PROBE_PROMPT}],
            ),
            timeout=self.probe_timeout,
        )

    async def ensure_ready(self) -> str:
        """
        Return the cached model, probing the priority list if needed.

        Raises:
            ModelUnavailableError: every candidate failed or timed out
        """
        if self._model_name is not None:
            return self._model_name

        async with self._probe_lock:
            if self._model_name is not None:
                return self._model_name

            self._state = STATE_PROBING
            for model_name in self.model_priority:
                logger.info("Testing model: %s", model_name)
                try:
                    await self._probe(model_name)
                except asyncio.TimeoutError:
                    logger.warning(
                        "Model %s did not answer within %.1fs",
                        model_name,
                        self.probe_timeout,
                    )
                    continue
                except anthropic.APIError as e:
                    logger.warning("Model %s unavailable: %s", model_name, e)
                    continue

                self._model_name = model_name
                self._state = STATE_READY
                logger.info("Model available: %s", model_name)
                return model_name

            self._state = STATE_FAILED
            logger.error(
                "No available models found (tried %d)", len(self.model_priority)
            )
            raise ModelUnavailableError("No available models found")

    async def generate(self, prompt: str, system: Optional[str] = None) -> str:
        """
        Generate text with the cached model.

        Args:
            prompt: User message
            system: Optional system prompt

        Returns:
            Concatenated response text

        Raises:
            ModelUnavailableError: probing failed
            GenerationTimeoutError: no answer within generation_timeout
            GenerationNotFoundError: the cached model no longer exists
            GenerationError: any other API failure or an empty response
        """
        model_name = await self.ensure_ready()

        request_params = {
            "model": model_name,
            "max_tokens": settings.max_output_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            request_params["system"] = system

        try:
            response = await asyncio.wait_for(
                self.client.messages.create(**request_params),
                timeout=self.generation_timeout,
            )
        except (asyncio.TimeoutError, anthropic.APITimeoutError) as e:
            self.invalidate("timeout")
            raise GenerationTimeoutError("AI response timeout") from e
        except anthropic.NotFoundError as e:
            self.invalidate("not found")
            raise GenerationNotFoundError(f"Model {model_name} not found") from e
        except anthropic.APIError as e:
            message = str(e).lower()
            if _looks_like_timeout(message):
                self.invalidate("timeout")
                raise GenerationTimeoutError("AI response timeout") from e
            if _looks_like_not_found(message):
                self.invalidate("not found")
                raise GenerationNotFoundError(f"Model {model_name} not found") from e
            raise GenerationError(f"AI service error: {e}") from e

        text = _response_text(response)
        if not text:
            raise GenerationError("No text content in AI response")
        return text


model_gateway = ModelGateway()


def get_model_gateway() -> ModelGateway:
    """FastAPI dependency returning the process-wide gateway."""
    return model_gateway


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================


class AIGatewayError(Exception):
    """Base class for AI gateway failures."""

    pass


class ModelUnavailableError(AIGatewayError):
    """Every model in the priority list failed its probe."""

    pass


class GenerationError(AIGatewayError):
    """A generation call failed."""

    pass


class GenerationTimeoutError(GenerationError):
    """A generation call exceeded its timeout."""

    pass


class GenerationNotFoundError(GenerationError):
    """The cached model was not found (deprecated or withdrawn)."""

    pass
