"""
Insight request/response models exchanged with the narrative service.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from sqinch.schema import AnalysisView


class InsightRequest(BaseModel):
    """Narrative request for one result view"""
    view: AnalysisView
    rows: List[Dict[str, Any]] = Field(default_factory=list, description="The view's analysis table")
    summary: Dict[str, Any] = Field(default_factory=dict, description="Full insight summary")


class InsightResponse(BaseModel):
    """Generated narrative, or the reason there is none"""
    view: AnalysisView
    success: bool
    insights: Optional[str] = None
    error: Optional[str] = None
    cached: bool = False
