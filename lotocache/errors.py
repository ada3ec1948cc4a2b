"""
Exception hierarchy for the draw cache and evaluation engine.

Every error raised on purpose by this package derives from LotoCacheError,
so callers can catch the whole family at an API boundary.
"""


class LotoCacheError(Exception):
    """Base class for all lotocache errors."""


class InvalidCombinationError(LotoCacheError, ValueError):
    """A candidate combination is malformed or out of range."""


class InvalidDrawError(LotoCacheError, ValueError):
    """A raw draw record cannot be normalized."""


class InvalidTierTableError(LotoCacheError, ValueError):
    """A prize tier table is inconsistent."""


class CacheNotReadyError(LotoCacheError, RuntimeError):
    """No snapshot has been built and no draw source is available."""


class BatchCancelledError(LotoCacheError):
    """A batch item was skipped because the deadline passed or the caller cancelled."""
