"""
Catalog Space Efficiency Analytics
Configuration Module
"""
from .settings import AnalysisSettings, InsightSettings, Settings, get_settings

__all__ = ["AnalysisSettings", "InsightSettings", "Settings", "get_settings"]
