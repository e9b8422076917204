"""Best-effort view analytics with per-session deduplication."""

import logging
import threading
from collections import OrderedDict
from typing import Optional, Tuple

from ..services import PortfolioStore

logger = logging.getLogger(__name__)


class ViewRecorder:
    """Counts a view once per (portfolio, visitor session).

    Seen pairs live in a bounded in-memory LRU, so a revisit is only
    recognized while its entry is still cached. Recording never raises:
    a lost view is acceptable, a broken page is not.
    """

    def __init__(self, store: PortfolioStore, cache_size: int = 10000):
        self.store = store
        self.cache_size = max(1, cache_size)
        self._seen: "OrderedDict[Tuple[int, str], None]" = OrderedDict()
        self._lock = threading.Lock()

    def _first_visit(self, key: Tuple[int, str]) -> bool:
        with self._lock:
            if key in self._seen:
                self._seen.move_to_end(key)
                return False
            self._seen[key] = None
            if len(self._seen) > self.cache_size:
                self._seen.popitem(last=False)
            return True

    def _forget(self, key: Tuple[int, str]) -> None:
        with self._lock:
            self._seen.pop(key, None)

    def record_view(self, portfolio_id: int, session_id: Optional[str] = None) -> bool:
        """Increment the view counter unless this session already counted.

        Returns True when a view was added.
        """
        key = (portfolio_id, session_id) if session_id else None
        if key is not None and not self._first_visit(key):
            logger.debug(f"Duplicate view of portfolio {portfolio_id} ignored")
            return False

        try:
            counted = self.store.increment_views(portfolio_id)
        except Exception as e:
            logger.warning(f"Failed to record view for portfolio {portfolio_id}: {e}")
            if key is not None:
                self._forget(key)
            return False

        if not counted:
            logger.warning(f"View for unknown or inactive portfolio {portfolio_id} ignored")
        return counted
