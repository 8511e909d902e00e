"""
In-process analysis store.

Keeps analysis results for the lifetime of the process only.
"""
import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

import structlog

from ratiolens.config import get_settings
from ratiolens.engine.models import StatementAnalysis
from ratiolens.exceptions import AnalysisNotFoundError
from ratiolens.schemas.report import CreditReport

logger = structlog.get_logger(__name__)


@dataclass
class StoredAnalysis:
    """One analyzed upload."""
    id: str
    filename: Optional[str]
    analysis: StatementAnalysis
    report: CreditReport
    sector_description: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class AnalysisStore:
    """
    Thread-safe, insertion-ordered in-memory store.

    Holds at most max_items analyses; saving beyond that evicts the oldest.
    """

    def __init__(self, max_items: Optional[int] = None):
        self._items: "OrderedDict[str, StoredAnalysis]" = OrderedDict()
        self._lock = threading.RLock()
        self._max_items = max_items if max_items is not None else get_settings().analysis_store_max_items

    def save(
        self,
        analysis: StatementAnalysis,
        report: CreditReport,
        sector_description: str,
        filename: Optional[str] = None,
    ) -> StoredAnalysis:
        stored = StoredAnalysis(
            id=str(uuid.uuid4()),
            filename=filename,
            analysis=analysis,
            report=report,
            sector_description=sector_description,
        )
        evicted = []
        with self._lock:
            self._items[stored.id] = stored
            while len(self._items) > self._max_items:
                evicted.append(self._items.popitem(last=False)[0])
        logger.info("Analysis stored", analysis_id=stored.id)
        if evicted:
            logger.info("Analyses evicted", analysis_ids=evicted)
        return stored

    def get(self, analysis_id: str) -> StoredAnalysis:
        """
        Get a stored analysis.

        Raises:
            AnalysisNotFoundError: No analysis with this id.
        """
        with self._lock:
            stored = self._items.get(analysis_id)
        if stored is None:
            raise AnalysisNotFoundError(analysis_id)
        return stored

    def list(self) -> List[StoredAnalysis]:
        with self._lock:
            return list(self._items.values())

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


# Singleton instance
_store_instance: Optional[AnalysisStore] = None


def get_analysis_store() -> AnalysisStore:
    """Get singleton AnalysisStore instance."""
    global _store_instance
    if _store_instance is None:
        _store_instance = AnalysisStore()
    return _store_instance
