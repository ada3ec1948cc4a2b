"""
Prize tier classification.

The payout structure is data, not code: a TierTable is an ordered tuple of
PrizeTier rules scanned from most to least specific, and the first rule that
matches a (main matches, complementary match) pair wins. DEFAULT_TIER_TABLE
carries the ten ranks of the 5/49 + complementary game.

Which outcomes count as a *win* is a separate policy (is_win). The default
policy is

    main_matches >= 2 or (main_matches >= 1 and complementary_match)

It is independent of the payouts: an outcome the policy counts as a win adds
its tier payout to the gains even when that payout is zero, and the single
number tier ("1") pays out 2.20 in the table yet is not a win under the
default policy.
"""
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from lotocache.config import MAIN_COUNT
from lotocache.errors import InvalidTierTableError


@dataclass(frozen=True)
class PrizeTier:
    """
    One payout bracket.

    main_matches is a minimum: an outcome with at least that many main
    numbers qualifies. complementary: True requires a complementary match,
    False requires no match, None accepts either.
    """

    label: str
    main_matches: int
    complementary: Optional[bool]
    payout: float

    def matches(self, main_matches, complementary_match):
        if main_matches < self.main_matches:
            return False
        if self.complementary is None:
            return True
        return self.complementary == bool(complementary_match)

    @property
    def specificity(self):
        return (self.main_matches, self.complementary is not None, bool(self.complementary))


NO_PRIZE = PrizeTier(label="no prize", main_matches=-1, complementary=None, payout=0.0)

DEFAULT_TIER_TABLE = (
    PrizeTier("5+complementary", 5, True, 2_000_000.0),
    PrizeTier("5", 5, False, 100_000.0),
    PrizeTier("4+complementary", 4, True, 1_000.0),
    PrizeTier("4", 4, False, 500.0),
    PrizeTier("3+complementary", 3, True, 50.0),
    PrizeTier("3", 3, False, 20.0),
    PrizeTier("2+complementary", 2, True, 20.0),
    PrizeTier("2", 2, False, 5.0),
    PrizeTier("1+complementary", 1, True, 5.0),
    PrizeTier("1", 1, False, 2.20),
)


def classify(main_matches, complementary_match, table=DEFAULT_TIER_TABLE) -> PrizeTier:
    """Return the first tier in table matching the outcome, or NO_PRIZE."""
    for tier in table:
        if tier.matches(main_matches, complementary_match):
            return tier
    return NO_PRIZE


def is_win(main_matches, complementary_match) -> bool:
    """Default win policy: 2+ main numbers, or 1+ main number with the complementary."""
    return main_matches >= 2 or (main_matches >= 1 and bool(complementary_match))


# ── Building tables from configuration ──────────────────────────────────

def _parse_complementary(value):
    if value is None or value is True or value is False:
        return value
    if isinstance(value, float) and pd.isna(value):
        return None
    text = str(value).strip().lower()
    if text in ("", "any", "none", "either", "*"):
        return None
    if text in ("1", "true", "yes", "y"):
        return True
    if text in ("0", "false", "no", "n"):
        return False
    raise InvalidTierTableError(f"unrecognized complementary flag {value!r}")


def validate_tier_table(table) -> tuple:
    """Check a table and return it as a tuple, most specific tier first."""
    table = tuple(table)
    if not table:
        raise InvalidTierTableError("tier table is empty")
    seen = set()
    for tier in table:
        if tier.label in seen:
            raise InvalidTierTableError(f"duplicate tier label {tier.label!r}")
        seen.add(tier.label)
        if not 0 <= tier.main_matches <= MAIN_COUNT:
            raise InvalidTierTableError(
                f"tier {tier.label!r}: main_matches must be in [0,{MAIN_COUNT}]"
            )
        if tier.payout < 0:
            raise InvalidTierTableError(f"tier {tier.label!r}: negative payout")
    return tuple(sorted(table, key=lambda t: t.specificity, reverse=True))


def tier_table_from_records(records) -> tuple:
    """
    Build a tier table from mappings with keys label, main_matches,
    complementary and payout.
    """
    tiers = []
    for rec in records:
        try:
            tiers.append(PrizeTier(
                label=str(rec["label"]),
                main_matches=int(rec["main_matches"]),
                complementary=_parse_complementary(rec.get("complementary")),
                payout=float(rec["payout"]),
            ))
        except InvalidTierTableError:
            raise
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidTierTableError(f"bad tier record {rec!r}: {e}") from e
    return validate_tier_table(tiers)


def tier_table_from_frame(df: pd.DataFrame) -> tuple:
    """Build a tier table from a DataFrame with one tier per row."""
    df = df.copy()
    df.columns = df.columns.str.lower().str.strip()
    return tier_table_from_records(df.to_dict(orient="records"))


def load_tier_table(path) -> tuple:
    """Read a tier table CSV (label, main_matches, complementary, payout)."""
    return tier_table_from_frame(pd.read_csv(path, dtype={"complementary": str}))
