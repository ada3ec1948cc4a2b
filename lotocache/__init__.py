"""
Draw cache and combination evaluation engine for 5/49 + complementary lotteries.

Modules:
- draws: normalized Draw records, raw-record and DataFrame adapters
- tiers: prize tier table, classification and the win policy
- evaluator: combination validation and per-draw matching
- cache_index: immutable, indexed snapshot of historical draws
- batch: single and concurrent batch evaluation (TestResult / TestFailure)
- service: caller-owned facade with build / refresh / stats / test operations
- analysis: result tables, match distribution, random baseline comparison
"""

from lotocache.batch import BatchRunner, TestFailure, TestResult
from lotocache.cache_index import CacheIndex, CacheStats
from lotocache.draws import Draw, normalize_draw
from lotocache.errors import (
    BatchCancelledError,
    CacheNotReadyError,
    InvalidCombinationError,
    InvalidDrawError,
    InvalidTierTableError,
    LotoCacheError,
)
from lotocache.evaluator import Combination, Match, evaluate, validate_combination
from lotocache.service import DrawCacheService
from lotocache.tiers import DEFAULT_TIER_TABLE, NO_PRIZE, PrizeTier, classify, is_win

__version__ = "1.0.0"

__all__ = [
    "BatchRunner",
    "TestResult",
    "TestFailure",
    "CacheIndex",
    "CacheStats",
    "Draw",
    "normalize_draw",
    "Combination",
    "Match",
    "evaluate",
    "validate_combination",
    "DrawCacheService",
    "PrizeTier",
    "DEFAULT_TIER_TABLE",
    "NO_PRIZE",
    "classify",
    "is_win",
    "LotoCacheError",
    "InvalidCombinationError",
    "InvalidDrawError",
    "InvalidTierTableError",
    "CacheNotReadyError",
    "BatchCancelledError",
]
