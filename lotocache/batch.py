"""
Batch evaluation of candidate combinations against a cache snapshot.

test_combination() scans a deterministic slice of the snapshot (optional
inclusive date window, then an optional newest-first prefix of max_draws)
and aggregates wins, gains, tier counts, win rate and ROI.

test_multiple_combinations() splits its input into fixed-size batches and
runs each batch on a thread pool. Results come back in input order. A
combination that fails to evaluate occupies its slot with a TestFailure and
does not affect its neighbours.
"""
import logging
import threading
import time
import warnings
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from numbers import Integral
from typing import Callable, Optional

from lotocache.config import (
    BATCH_SIZE,
    MAX_WORKERS,
    MIN_RELIABLE_DRAWS,
    TICKET_PRICE,
    Settings,
)
from lotocache.errors import BatchCancelledError
from lotocache.evaluator import evaluate, validate_combination
from lotocache.tiers import DEFAULT_TIER_TABLE, classify, is_win, load_tier_table, validate_tier_table

log = logging.getLogger(__name__)


# ── Result types ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TestResult:
    """Outcome of one combination over one slice of history."""

    __test__ = False  # not a pytest class

    combination: tuple
    complementary: int
    total_tests: int
    wins: int
    win_rate: float
    total_gains: float
    average_gain: float
    roi: float
    categories: dict
    execution_time_ms: float = field(default=0.0, compare=False)

    ok = True

    def to_dict(self):
        return {
            "combination": list(self.combination),
            "complementary": self.complementary,
            "totalTests": self.total_tests,
            "wins": self.wins,
            "winRate": self.win_rate,
            "totalGains": self.total_gains,
            "averageGain": self.average_gain,
            "roi": self.roi,
            "categories": dict(self.categories),
            "executionTimeMs": self.execution_time_ms,
        }


@dataclass(frozen=True)
class TestFailure:
    """Error marker occupying the slot of a combination that could not be evaluated."""

    __test__ = False

    index: int
    combination: object
    complementary: object
    error: str
    error_type: str

    ok = False

    @classmethod
    def from_exception(cls, index, numbers, complementary, exc):
        return cls(
            index=index,
            combination=numbers,
            complementary=complementary,
            error=str(exc),
            error_type=type(exc).__name__,
        )

    def to_dict(self):
        combo = self.combination
        if isinstance(combo, (list, tuple)):
            combo = list(combo)
        return {
            "index": self.index,
            "combination": combo,
            "complementary": self.complementary,
            "error": self.error,
            "errorType": self.error_type,
        }


def _unpack(item):
    """Accept {"numbers": [...], "complementary": n} or (numbers, complementary)."""
    if hasattr(item, "get"):
        numbers = item.get("numbers", item.get("combination"))
        return numbers, item.get("complementary")
    if isinstance(item, (list, tuple)) and len(item) == 2:
        return item[0], item[1]
    raise ValueError(f"cannot read a combination from {item!r}")


# ── Runner ──────────────────────────────────────────────────────────────

class BatchRunner:
    """
    Evaluates combinations against CacheIndex snapshots.

    Parameters
    ----------
    tier_table : ordered tuple of PrizeTier
    ticket_price : cost of one ticket, used for the ROI
    batch_size : combinations evaluated concurrently per batch
    max_workers : thread pool size (None = executor default)
    win_policy : callable(main_matches, complementary_match) -> bool
    observer : optional callable(draw, match, tier), called for every
        evaluated draw. Leave it None in production.
    """

    def __init__(self, tier_table=DEFAULT_TIER_TABLE, ticket_price=TICKET_PRICE,
                 batch_size=BATCH_SIZE, max_workers=MAX_WORKERS,
                 win_policy: Callable = is_win, observer: Optional[Callable] = None):
        if ticket_price <= 0:
            raise ValueError(f"ticket_price must be positive, got {ticket_price}")
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self.tier_table = validate_tier_table(tier_table)
        self.ticket_price = ticket_price
        self.batch_size = batch_size
        self.max_workers = max_workers
        self.win_policy = win_policy
        self.observer = observer

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **kwargs) -> "BatchRunner":
        """Build a runner from Settings (environment by default)."""
        settings = settings or Settings.from_env()
        if settings.tier_table_path and "tier_table" not in kwargs:
            kwargs["tier_table"] = load_tier_table(settings.tier_table_path)
        kwargs.setdefault("ticket_price", settings.ticket_price)
        kwargs.setdefault("batch_size", settings.batch_size)
        kwargs.setdefault("max_workers", settings.max_workers)
        return cls(**kwargs)

    # ── Draw selection ──────────────────────────────────────────────────

    @staticmethod
    def select_draws(index, max_draws=None, start_date=None, end_date=None):
        """Date window first, then the newest max_draws of what is left."""
        if max_draws is not None:
            if isinstance(max_draws, bool) or not isinstance(max_draws, Integral) or max_draws < 0:
                raise ValueError(f"max_draws must be a non-negative integer, got {max_draws!r}")
        draws = index.window(start_date, end_date)
        if max_draws is not None and max_draws < len(draws):
            draws = draws[:max_draws]
        return draws

    # ── Single combination ──────────────────────────────────────────────

    def scan(self, combination, draws):
        """Yield (draw, match, tier, won) for each draw, in order."""
        table = self.tier_table
        policy = self.win_policy
        observer = self.observer
        for draw in draws:
            match = evaluate(combination, draw)
            tier = classify(match.main_matches, match.complementary_match, table)
            if observer is not None:
                observer(draw, match, tier)
            yield draw, match, tier, policy(match.main_matches, match.complementary_match)

    def test_combination(self, numbers, complementary, index, max_draws=None,
                         start_date=None, end_date=None) -> TestResult:
        """Evaluate one combination over the selected slice of index."""
        started = time.perf_counter()
        combo = validate_combination(numbers, complementary)
        draws = self.select_draws(index, max_draws, start_date, end_date)

        total_tests = len(draws)
        if total_tests < MIN_RELIABLE_DRAWS:
            warnings.warn(f"Only {total_tests} draws in the evaluation window. "
                          "Results may be unreliable.")

        wins = 0
        total_gains = 0.0
        categories = {}
        for _, _, tier, won in self.scan(combo, draws):
            if won:
                wins += 1
                total_gains += tier.payout
                categories[tier.label] = categories.get(tier.label, 0) + 1

        investment = total_tests * self.ticket_price
        roi = (total_gains - investment) / investment * 100 if investment > 0 else 0.0
        win_rate = wins / total_tests * 100 if total_tests > 0 else 0.0
        average_gain = total_gains / wins if wins > 0 else 0.0

        return TestResult(
            combination=combo.numbers,
            complementary=combo.complementary,
            total_tests=total_tests,
            wins=wins,
            win_rate=win_rate,
            total_gains=total_gains,
            average_gain=average_gain,
            roi=roi,
            categories=categories,
            execution_time_ms=(time.perf_counter() - started) * 1000,
        )

    # ── Many combinations ───────────────────────────────────────────────

    def _run_item(self, i, item, index, opts, expires, cancel_event):
        numbers = complementary = None
        try:
            if _expired(expires, cancel_event):
                raise BatchCancelledError("deadline exceeded or batch cancelled before start")
            numbers, complementary = _unpack(item)
            return self.test_combination(numbers, complementary, index, **opts)
        except Exception as e:
            log.debug("Combination #%d failed: %s", i, e)
            return TestFailure.from_exception(i, numbers, complementary, e)

    def test_multiple_combinations(self, combinations, index, max_draws=None,
                                   start_date=None, end_date=None,
                                   deadline: Optional[float] = None,
                                   cancel_event: Optional[threading.Event] = None) -> list:
        """
        Evaluate many combinations, batch_size at a time, in input order.

        deadline is a budget in seconds from the call; once it has passed,
        or cancel_event is set, items that have not started yet are
        returned as TestFailure with error_type "BatchCancelledError".
        Evaluations already running finish normally.
        """
        started = time.perf_counter()
        items = list(combinations)
        results = [None] * len(items)
        expires = None if deadline is None else time.monotonic() + deadline
        opts = {"max_draws": max_draws, "start_date": start_date, "end_date": end_date}

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            for offset in range(0, len(items), self.batch_size):
                batch = range(offset, min(offset + self.batch_size, len(items)))
                futures = [
                    (i, pool.submit(self._run_item, i, items[i], index, opts,
                                    expires, cancel_event))
                    for i in batch
                ]
                for i, fut in futures:
                    results[i] = fut.result()

        failed = sum(1 for r in results if not r.ok)
        log.info("%d combinations tested in %.1fms (%d failed)",
                 len(items), (time.perf_counter() - started) * 1000, failed)
        return results


def _expired(expires, cancel_event):
    if cancel_event is not None and cancel_event.is_set():
        return True
    return expires is not None and time.monotonic() >= expires
