"""
Immutable, indexed snapshot of historical draws.

CacheIndex.build() scans every raw record once, drops the malformed ones
(counted, never fatal), sorts the rest newest first and groups them by year,
by year-month and by date. The object is complete before build() returns
and is never modified afterwards: refresh() returns a new snapshot and
leaves the old one intact, so a reader holding a reference always sees a
consistent, if stale, view.
"""
import logging
import time
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Optional

from lotocache.config import BYTES_PER_DRAW, CACHE_VERSION, RECENT_DEFAULT
from lotocache.draws import _parse_date, normalize_draw
from lotocache.errors import InvalidDrawError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheStats:
    total_draws: int
    date_range: tuple
    built_at: Optional[datetime]
    version: Optional[str]
    dropped: int = 0
    build_time_ms: float = 0.0
    memory_usage: str = "0 B"

    def to_dict(self):
        start, end = self.date_range
        return {
            "totalDraws": self.total_draws,
            "dateRange": {"start": start, "end": end},
            "builtAt": self.built_at.isoformat() if self.built_at else None,
            "version": self.version,
            "dropped": self.dropped,
            "buildTimeMs": self.build_time_ms,
            "memoryUsage": self.memory_usage,
        }


EMPTY_STATS = CacheStats(total_draws=0, date_range=("", ""), built_at=None, version=None)


def _month_key(year, month):
    return f"{year}-{month}"


def _freeze_groups(groups):
    return MappingProxyType({k: tuple(v) for k, v in groups.items()})


def _date_bound(value):
    """ISO text for a window bound given as text, date, datetime or Timestamp."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return _parse_date(value).isoformat()
    except InvalidDrawError as e:
        raise ValueError(f"invalid date bound {value!r}") from e


class CacheIndex:
    """
    A built snapshot. Construct with CacheIndex.build(raw_draws).

    Attributes
    ----------
    draws : tuple of Draw, newest first (ties keep input order)
    by_year : mapping year -> tuple of Draw
    by_year_month : mapping "YYYY-M" -> tuple of Draw
    by_date : mapping ISO date -> Draw (last record for a date wins)
    """

    __slots__ = ("draws", "by_year", "by_year_month", "by_date",
                 "built_at", "version", "dropped", "build_time_ms")

    def __init__(self, draws, by_year, by_year_month, by_date,
                 built_at, version, dropped, build_time_ms):
        set_ = object.__setattr__
        set_(self, "draws", draws)
        set_(self, "by_year", by_year)
        set_(self, "by_year_month", by_year_month)
        set_(self, "by_date", by_date)
        set_(self, "built_at", built_at)
        set_(self, "version", version)
        set_(self, "dropped", dropped)
        set_(self, "build_time_ms", build_time_ms)

    def __setattr__(self, name, value):
        raise AttributeError("CacheIndex is immutable; use refresh() to get a new snapshot")

    def __delattr__(self, name):
        raise AttributeError("CacheIndex is immutable")

    def __repr__(self):
        start, end = self.date_range
        return (f"CacheIndex(total_draws={self.total_draws}, range={start!r}..{end!r}, "
                f"version={self.version!r})")

    # ── Construction ────────────────────────────────────────────────────

    @classmethod
    def build(cls, raw_draws, version=CACHE_VERSION) -> "CacheIndex":
        """Normalize, validate, sort and group raw draw records."""
        started = time.perf_counter()

        valid = []
        dropped = 0
        for i, record in enumerate(raw_draws):
            try:
                valid.append(normalize_draw(record))
            except InvalidDrawError as e:
                dropped += 1
                log.debug("Dropping draw record #%d: %s", i, e)

        draws = tuple(sorted(valid, key=lambda d: d.timestamp, reverse=True))

        by_year = defaultdict(list)
        by_month = defaultdict(list)
        by_date = {}
        for d in draws:
            by_year[d.year].append(d)
            by_month[_month_key(d.year, d.month)].append(d)
        # Walk oldest first so the last input record for a date overwrites.
        for d in valid:
            by_date[d.date] = d

        build_time_ms = (time.perf_counter() - started) * 1000
        index = cls(
            draws=draws,
            by_year=_freeze_groups(by_year),
            by_year_month=_freeze_groups(by_month),
            by_date=MappingProxyType(by_date),
            built_at=datetime.now(timezone.utc),
            version=version,
            dropped=dropped,
            build_time_ms=build_time_ms,
        )

        if dropped:
            log.warning("Dropped %d malformed draw record(s) out of %d",
                        dropped, dropped + len(draws))
        start, end = index.date_range
        log.info("Cache built in %.1fms - %d draws (%s to %s)",
                 build_time_ms, len(draws), start or "-", end or "-")
        return index

    def refresh(self, raw_draws) -> "CacheIndex":
        """Build a brand new snapshot; this one is left untouched."""
        return type(self).build(raw_draws, version=self.version)

    # ── Stats ───────────────────────────────────────────────────────────

    @property
    def total_draws(self):
        return len(self.draws)

    @property
    def date_range(self):
        if not self.draws:
            return ("", "")
        return (self.draws[-1].date, self.draws[0].date)

    def stats(self) -> CacheStats:
        return CacheStats(
            total_draws=self.total_draws,
            date_range=self.date_range,
            built_at=self.built_at,
            version=self.version,
            dropped=self.dropped,
            build_time_ms=self.build_time_ms,
            memory_usage=self.memory_usage(),
        )

    def memory_usage(self):
        """Rough resident size of the snapshot as a human string."""
        total = self.total_draws * BYTES_PER_DRAW
        if total < 1024:
            return f"{total} B"
        if total < 1024 * 1024:
            return f"{total / 1024:.1f} KB"
        return f"{total / (1024 * 1024):.1f} MB"

    # ── Lookups ─────────────────────────────────────────────────────────

    def recent(self, count=RECENT_DEFAULT):
        return self.draws[:max(count, 0)]

    def for_year(self, year):
        return self.by_year.get(year, ())

    def for_month(self, year, month):
        return self.by_year_month.get(_month_key(year, month), ())

    def on_date(self, iso_date):
        return self.by_date.get(iso_date)

    def window(self, start_date=None, end_date=None):
        """Draws with start_date <= date <= end_date (inclusive), newest first."""
        start_date = _date_bound(start_date)
        end_date = _date_bound(end_date)
        if not start_date and not end_date:
            return self.draws
        return tuple(
            d for d in self.draws
            if not (start_date and d.date < start_date)
            and not (end_date and d.date > end_date)
        )
