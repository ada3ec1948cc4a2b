"""
Historical draw records.

A Draw is the normalized, immutable form of one raw draw record coming from
the external draw store. Raw records look like

    {"date": "2024-01-01", "mainNumbers": [1, 2, 3, 4, 5], "complementaryNumber": 6}

snake_case keys (main_numbers, complementary_number, complementary) are
accepted too. records_from_frame() adapts a pandas DataFrame with the
columns date, num1-num5, complementary to that shape.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from numbers import Integral
from typing import Optional

import pandas as pd

from lotocache.config import (
    COMPLEMENTARY_MAX,
    COMPLEMENTARY_MIN,
    MAIN_COUNT,
    MAIN_MAX,
    MAIN_MIN,
)
from lotocache.errors import InvalidDrawError

NUM_COLS = [f"num{i}" for i in range(1, MAIN_COUNT + 1)]

_MAIN_KEYS = ("mainNumbers", "main_numbers", "numbers")
_COMPLEMENTARY_KEYS = ("complementaryNumber", "complementary_number", "complementary")
_ID_KEYS = ("id", "draw_id", "draw_number")


@dataclass(frozen=True)
class Draw:
    """One historical draw: 5 main numbers, 1 complementary, a date."""

    date: str
    main_numbers: frozenset
    complementary: int
    year: int = field(compare=False)
    month: int = field(compare=False)
    day: int = field(compare=False)
    timestamp: float = field(compare=False)
    draw_id: Optional[str] = field(default=None, compare=False)

    @property
    def numbers(self):
        """Main numbers as a sorted tuple, for display."""
        return tuple(sorted(self.main_numbers))

    def to_dict(self):
        return {
            "date": self.date,
            "mainNumbers": list(self.numbers),
            "complementaryNumber": self.complementary,
        }


def _is_int(value):
    return isinstance(value, Integral) and not isinstance(value, bool)


def _parse_date(value) -> date:
    """Accept ISO text, date, datetime or pandas.Timestamp."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            raise InvalidDrawError(f"unparseable date {value!r}")
    raise InvalidDrawError(f"unsupported date type {type(value).__name__}")


def _first_present(record, keys):
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return None


def normalize_draw(record) -> Draw:
    """
    Turn a raw record into a Draw.

    Raises InvalidDrawError when the date is missing or unparseable, when the
    main numbers are not exactly 5 distinct integers in [1, 49], or when the
    complementary number is not an integer in [1, 10].
    """
    if isinstance(record, Draw):
        return record
    if not hasattr(record, "get"):
        raise InvalidDrawError(f"draw record must be a mapping, got {type(record).__name__}")

    raw_date = record.get("date")
    if raw_date is None:
        raise InvalidDrawError("missing date")
    d = _parse_date(raw_date)

    mains = _first_present(record, _MAIN_KEYS)
    if mains is None or isinstance(mains, (str, bytes)):
        raise InvalidDrawError("missing main numbers")
    mains = list(mains)
    if len(mains) != MAIN_COUNT:
        raise InvalidDrawError(f"expected {MAIN_COUNT} main numbers, got {len(mains)}")
    if not all(_is_int(n) for n in mains):
        raise InvalidDrawError(f"main numbers must be integers: {mains}")
    mains = [int(n) for n in mains]
    if any(n < MAIN_MIN or n > MAIN_MAX for n in mains):
        raise InvalidDrawError(f"main numbers out of [{MAIN_MIN},{MAIN_MAX}]: {mains}")
    main_set = frozenset(mains)
    if len(main_set) != MAIN_COUNT:
        raise InvalidDrawError(f"duplicate main numbers: {mains}")

    compl = _first_present(record, _COMPLEMENTARY_KEYS)
    if not _is_int(compl):
        raise InvalidDrawError(f"complementary number must be an integer, got {compl!r}")
    compl = int(compl)
    if compl < COMPLEMENTARY_MIN or compl > COMPLEMENTARY_MAX:
        raise InvalidDrawError(
            f"complementary number out of [{COMPLEMENTARY_MIN},{COMPLEMENTARY_MAX}]: {compl}"
        )

    draw_id = _first_present(record, _ID_KEYS)
    ts = datetime(d.year, d.month, d.day, tzinfo=timezone.utc).timestamp()

    return Draw(
        date=d.isoformat(),
        main_numbers=main_set,
        complementary=compl,
        year=d.year,
        month=d.month,
        day=d.day,
        timestamp=ts,
        draw_id=None if draw_id is None else str(draw_id),
    )


def records_from_frame(df: pd.DataFrame) -> list:
    """
    Convert a draws DataFrame (date, num1-num5, complementary) to raw records.

    Rows with missing values are passed through with None in place, so the
    cache build drops and counts them like any other malformed record.
    """
    missing = [c for c in ["date"] + NUM_COLS + ["complementary"] if c not in df.columns]
    if missing:
        raise ValueError(f"draws frame is missing columns: {missing}")

    def _cell(value):
        if pd.isna(value):
            return None
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

    records = []
    for row in df.itertuples(index=False):
        row = row._asdict()
        raw_date = row["date"]
        if isinstance(raw_date, pd.Timestamp):
            raw_date = raw_date.date().isoformat()
        records.append({
            "date": None if pd.isna(raw_date) else raw_date,
            "mainNumbers": [_cell(row[c]) for c in NUM_COLS],
            "complementaryNumber": _cell(row["complementary"]),
        })
    return records


def load_draws_csv(path) -> list:
    """Read a draws CSV with pandas and return raw records."""
    df = pd.read_csv(path)
    df.columns = df.columns.str.lower().str.strip()
    return records_from_frame(df)
