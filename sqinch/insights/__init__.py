"""
Narrative Insights Module
"""
from .models import InsightRequest, InsightResponse
from .prompts import build_prompt
from .service import NarrativeService

__all__ = [
    "InsightRequest",
    "InsightResponse",
    "build_prompt",
    "NarrativeService",
]
