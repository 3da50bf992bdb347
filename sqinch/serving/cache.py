"""
Narrative Cache

Process-local cache for generated narratives, keyed by a digest of the
request content and the view identifier. It belongs to the presentation
layer: analysis results never depend on it, and it is lost on restart.
"""

import hashlib
import json
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Dict, List, Optional

import structlog

from sqinch.insights.models import InsightResponse
from sqinch.schema import AnalysisView

logger = structlog.get_logger(__name__)


def content_digest(rows: List[Dict[str, Any]], summary: Dict[str, Any]) -> str:
    """Stable digest of a view's table and summary"""
    payload = json.dumps({"rows": rows, "summary": summary}, sort_keys=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class NarrativeCache:
    """
    Bounded in-memory cache of successful narratives.

    Example:
        cache = NarrativeCache()
        response = await cache.get_or_set(view, digest, factory)
    """

    def __init__(self, max_entries: int = 256):
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, InsightResponse]" = OrderedDict()

    @staticmethod
    def _key(view: AnalysisView, digest: str) -> str:
        """Generate namespaced key"""
        return f"{AnalysisView(view).value}:{digest}"

    def get(self, view: AnalysisView, digest: str) -> Optional[InsightResponse]:
        """Get a cached narrative"""
        key = self._key(view, digest)
        response = self._entries.get(key)
        if response is not None:
            self._entries.move_to_end(key)
        return response

    def set(self, view: AnalysisView, digest: str, response: InsightResponse) -> None:
        """Cache a narrative, evicting the least recently used entry when full"""
        key = self._key(view, digest)
        self._entries[key] = response
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    async def get_or_set(
        self,
        view: AnalysisView,
        digest: str,
        factory: Callable[[], Awaitable[InsightResponse]],
    ) -> InsightResponse:
        """
        Get from cache or generate and cache.

        Failed responses are returned but not cached, so the view can be
        requested again.
        """
        cached = self.get(view, digest)
        if cached is not None:
            logger.debug("Narrative cache hit", view=AnalysisView(view).value)
            return cached.model_copy(update={"cached": True})

        response = await factory()
        if response.success:
            self.set(view, digest, response)
        return response
