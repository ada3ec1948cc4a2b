"""
Caller-owned draw cache service.

DrawCacheService holds the currently published CacheIndex and exposes the
operations an API layer needs: build_index, refresh_cache, get_cache_stats,
test_combination and test_multiple_combinations. There is no module-level
instance; create one per application (or per test) and pass it around.

Publishing a snapshot is a single attribute assignment, done only after the
new CacheIndex is fully built. Readers take the reference once per call and
never lock. Concurrent refreshes are serialized by a writer lock so they
publish one after the other.

If a test call arrives before any build, the service builds lazily from its
draw source and logs a warning; with no source configured it raises
CacheNotReadyError. Snapshots never expire on their own: only
refresh_cache() replaces them.
"""
import logging
import threading
from typing import Callable, Iterable, Optional

from lotocache.batch import BatchRunner
from lotocache.cache_index import EMPTY_STATS, CacheIndex, CacheStats
from lotocache.errors import CacheNotReadyError
from lotocache.evaluator import validate_combination

log = logging.getLogger(__name__)


class DrawCacheService:
    """
    Parameters
    ----------
    source : optional zero-argument callable returning raw draw records.
        Used when build_index()/refresh_cache() get no records and for the
        lazy first build.
    runner : BatchRunner used for evaluations (default settings if None).
    """

    def __init__(self, source: Optional[Callable[[], Iterable]] = None,
                 runner: Optional[BatchRunner] = None):
        self.source = source
        self.runner = runner or BatchRunner()
        self._index = None
        self._write_lock = threading.Lock()

    @property
    def index(self) -> Optional[CacheIndex]:
        """The published snapshot, or None before the first build."""
        return self._index

    @property
    def ready(self):
        return self._index is not None

    def _fetch(self, raw_draws):
        if raw_draws is not None:
            return raw_draws
        if self.source is None:
            raise CacheNotReadyError("no draw records given and no draw source configured")
        return self.source()

    def _publish(self, raw_draws) -> CacheIndex:
        with self._write_lock:
            records = self._fetch(raw_draws)
            previous = self._index
            if previous is None:
                index = CacheIndex.build(records)
            else:
                index = previous.refresh(records)
            self._index = index
        return index

    # ── Lifecycle ───────────────────────────────────────────────────────

    def build_index(self, raw_draws=None) -> CacheStats:
        """Build and publish a snapshot from raw_draws (or the source)."""
        return self._publish(raw_draws).stats()

    def refresh_cache(self, raw_draws=None) -> CacheStats:
        """Rebuild from scratch and swap the published snapshot."""
        stats = self._publish(raw_draws).stats()
        log.info("Cache refreshed: %d draws, version %s", stats.total_draws, stats.version)
        return stats

    def get_cache_stats(self) -> CacheStats:
        """Stats of the published snapshot; never triggers a build."""
        index = self._index
        if index is None:
            return EMPTY_STATS
        return index.stats()

    def _current(self) -> CacheIndex:
        index = self._index
        if index is not None:
            return index
        log.warning("Cache not built yet; building on first use, this may be slow")
        with self._write_lock:
            if self._index is None:
                self._index = CacheIndex.build(self._fetch(None))
            return self._index

    # ── Evaluation ──────────────────────────────────────────────────────

    def test_combination(self, numbers, complementary, max_draws=None,
                         start_date=None, end_date=None):
        validate_combination(numbers, complementary)
        return self.runner.test_combination(
            numbers, complementary, self._current(),
            max_draws=max_draws, start_date=start_date, end_date=end_date,
        )

    def test_multiple_combinations(self, combinations, max_draws=None,
                                   start_date=None, end_date=None,
                                   deadline=None, cancel_event=None):
        return self.runner.test_multiple_combinations(
            combinations, self._current(),
            max_draws=max_draws, start_date=start_date, end_date=end_date,
            deadline=deadline, cancel_event=cancel_event,
        )
