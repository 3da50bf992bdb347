"""
Insights Endpoint

Generates the narrative for one result view on demand. Narratives are
cached per view and content, so repeated requests for an unchanged table
do not call the language model again.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from sqinch.insights import InsightRequest, InsightResponse, NarrativeService
from sqinch.schema import AnalysisView
from sqinch.serving.cache import NarrativeCache, content_digest

router = APIRouter()


class InsightPayload(BaseModel):
    """View table and insight summary from an analysis response"""
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    summary: Dict[str, Any] = Field(default_factory=dict)


def get_narrative_service(request: Request) -> NarrativeService:
    return request.app.state.narrative_service


def get_narrative_cache(request: Request) -> NarrativeCache:
    return request.app.state.narrative_cache


@router.post("/{view}", response_model=InsightResponse)
async def generate_insights(
    view: AnalysisView,
    payload: InsightPayload,
    service: NarrativeService = Depends(get_narrative_service),
    cache: NarrativeCache = Depends(get_narrative_cache),
) -> InsightResponse:
    """
    Narrative for one view.

    Always answers 200; an unavailable narrative is reported with
    ``success: false`` and never affects the analysis results.
    """
    insight_request = InsightRequest(view=view, rows=payload.rows, summary=payload.summary)
    digest = content_digest(payload.rows, payload.summary)

    return await cache.get_or_set(view, digest, lambda: service.generate(insight_request))
