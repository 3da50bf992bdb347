"""
API Routes Module
"""
from .health import router as health_router
from .analysis import router as analysis_router
from .export import router as export_router
from .insights import router as insights_router

__all__ = [
    "health_router",
    "analysis_router",
    "export_router",
    "insights_router",
]
