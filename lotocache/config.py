"""
Configuration for the draw cache and evaluation engine.

Game shape (5 main numbers out of 49, one complementary out of 10), ticket
price and batch sizing live here as module constants. Settings.from_env()
layers environment overrides on top of them:

    LOTOCACHE_TICKET_PRICE   price of one ticket (float, > 0)
    LOTOCACHE_BATCH_SIZE     combinations per concurrent batch (int, >= 1)
    LOTOCACHE_MAX_WORKERS    thread pool size (int, >= 1)
    LOTOCACHE_TIER_TABLE     CSV file with the prize tier table
"""
import os
from dataclasses import dataclass
from typing import Optional


# ── Game shape ──────────────────────────────────────────────────────────

MAIN_COUNT = 5
MAIN_MIN = 1
MAIN_MAX = 49
COMPLEMENTARY_MIN = 1
COMPLEMENTARY_MAX = 10

# ── Money ───────────────────────────────────────────────────────────────

TICKET_PRICE = 2.20

# ── Batching ────────────────────────────────────────────────────────────

BATCH_SIZE = 10
MAX_WORKERS = None  # ThreadPoolExecutor default

# ── Cache ───────────────────────────────────────────────────────────────

CACHE_VERSION = "1.0.0"
BYTES_PER_DRAW = 200  # rough footprint of one resident Draw
RECENT_DEFAULT = 100

# Below this many draws a result is still computed, but flagged.
MIN_RELIABLE_DRAWS = 5

ENV_PREFIX = "LOTOCACHE_"


def _env_float(name, default):
    raw = os.environ.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{ENV_PREFIX}{name} must be positive, got {raw!r}")
    return value


def _env_int(name, default):
    raw = os.environ.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}")
    if value < 1:
        raise ValueError(f"{ENV_PREFIX}{name} must be >= 1, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings for a BatchRunner."""

    ticket_price: float = TICKET_PRICE
    batch_size: int = BATCH_SIZE
    max_workers: Optional[int] = MAX_WORKERS
    tier_table_path: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        path = os.environ.get(ENV_PREFIX + "TIER_TABLE") or None
        return cls(
            ticket_price=_env_float("TICKET_PRICE", TICKET_PRICE),
            batch_size=_env_int("BATCH_SIZE", BATCH_SIZE),
            max_workers=_env_int("MAX_WORKERS", MAX_WORKERS),
            tier_table_path=path,
        )
