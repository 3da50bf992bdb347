"""
Narrative Service for AI-Powered Insights

Turns one result view (its table plus the insight summary) into analyst
narrative text through the Anthropic Messages API.

Calls are independent per view and are never retried. A failure is
returned as an unsuccessful ``InsightResponse`` and never affects the
analysis tables or other views.
"""

import asyncio
from typing import Any, Iterable, List, Optional

import structlog
from anthropic import APIError, APITimeoutError, AsyncAnthropic

from sqinch.config import InsightSettings, get_settings
from sqinch.exceptions import ExternalServiceError
from sqinch.insights.models import InsightRequest, InsightResponse
from sqinch.insights.prompts import build_prompt
from sqinch.schema import AnalysisView

logger = structlog.get_logger(__name__)

UNAVAILABLE = "Insights are unavailable for this view right now."


class NarrativeService:
    """
    Generates per-view narratives with Claude.

    Example:
        service = NarrativeService()
        response = await service.generate(
            InsightRequest(view="segment", rows=rows, summary=summary)
        )
    """

    def __init__(self, settings: Optional[InsightSettings] = None, client: Optional[Any] = None):
        self.settings = settings or get_settings().insights
        self.client = client

        if self.client is None and self.settings.is_configured:
            self.client = AsyncAnthropic(
                api_key=self.settings.anthropic_api_key.get_secret_value(),
                timeout=self.settings.timeout_seconds,
                max_retries=0,
            )

        self.enabled = self.settings.enabled and self.client is not None
        if self.enabled:
            logger.info("Narrative service initialized", model=self.settings.model)
        else:
            logger.info("Narrative insights disabled (no API key or feature disabled)")

    async def _complete(self, prompt: str, view: AnalysisView) -> str:
        """Send one prompt and return the response text"""
        try:
            response = await self.client.messages.create(
                model=self.settings.model,
                max_tokens=self.settings.max_tokens,
                temperature=self.settings.temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except APITimeoutError as e:
            raise ExternalServiceError("Narrative generation timed out", view=view.value) from e
        except APIError as e:
            raise ExternalServiceError(
                f"Narrative service error: {e.message}",
                view=view.value,
                details={"status_code": getattr(e, "status_code", None)},
            ) from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        ).strip()
        if not text:
            raise ExternalServiceError("Narrative service returned no text", view=view.value)
        return text

    async def generate(self, request: InsightRequest) -> InsightResponse:
        """
        Generate the narrative for one view.

        Never raises; failures are returned as ``success=False`` with a
        user-facing message.
        """
        view = request.view

        if not self.enabled:
            return InsightResponse(view=view, success=False, error="Narrative insights are not configured")

        try:
            prompt = build_prompt(view, request.rows, request.summary)
        except ValueError as e:
            return InsightResponse(view=view, success=False, error=str(e))
        except (AttributeError, KeyError, TypeError) as e:
            logger.warning("Rows do not match the view layout", view=view.value, error=repr(e))
            return InsightResponse(
                view=view,
                success=False,
                error=f"Rows are not a valid {view.value} table",
            )

        try:
            text = await self._complete(prompt, view)
        except ExternalServiceError as e:
            logger.warning("Narrative generation failed", view=view.value, error=e.message, details=e.details)
            return InsightResponse(view=view, success=False, error=UNAVAILABLE)

        logger.info("Generated narrative", view=view.value, characters=len(text))
        return InsightResponse(view=view, success=True, insights=text)

    async def generate_many(self, requests: Iterable[InsightRequest]) -> List[InsightResponse]:
        """Generate narratives for several distinct views concurrently"""
        unique = {}
        for request in requests:
            unique.setdefault(request.view, request)
        return list(await asyncio.gather(*(self.generate(r) for r in unique.values())))
