from datetime import date, datetime

import numpy as np
import pandas as pd
import pytest

from lotocache.cache_index import CacheIndex
from lotocache.draws import load_draws_csv, normalize_draw, records_from_frame
from lotocache.errors import InvalidDrawError


def test_normalize_valid_record():
    d = normalize_draw({"date": "2024-03-09", "mainNumbers": [49, 3, 17, 8, 22],
                        "complementaryNumber": 10, "id": 42})
    assert d.date == "2024-03-09"
    assert d.main_numbers == frozenset({3, 8, 17, 22, 49})
    assert d.numbers == (3, 8, 17, 22, 49)
    assert d.complementary == 10
    assert (d.year, d.month, d.day) == (2024, 3, 9)
    assert d.draw_id == "42"


def test_timestamp_orders_dates():
    a = normalize_draw({"date": "2024-01-01", "mainNumbers": [1, 2, 3, 4, 5], "complementaryNumber": 1})
    b = normalize_draw({"date": "2024-01-02", "mainNumbers": [1, 2, 3, 4, 5], "complementaryNumber": 1})
    assert b.timestamp - a.timestamp == 86400


def test_snake_case_aliases():
    d = normalize_draw({"date": "2023-12-31", "main_numbers": (1, 2, 3, 4, 5), "complementary": 7})
    assert d.complementary == 7
    d = normalize_draw({"date": "2023-12-31", "main_numbers": [1, 2, 3, 4, 5],
                        "complementary_number": 2})
    assert d.complementary == 2


@pytest.mark.parametrize("value", [date(2022, 5, 4), datetime(2022, 5, 4, 20, 15),
                                   pd.Timestamp("2022-05-04"), "2022-05-04T20:15:00"])
def test_date_types(value):
    d = normalize_draw({"date": value, "mainNumbers": [1, 2, 3, 4, 5], "complementaryNumber": 1})
    assert d.date == "2022-05-04"


def test_numpy_integers_accepted():
    nums = list(np.array([1, 2, 3, 4, 5], dtype=np.int64))
    d = normalize_draw({"date": "2022-05-04", "mainNumbers": nums,
                        "complementaryNumber": np.int64(3)})
    assert d.main_numbers == frozenset({1, 2, 3, 4, 5})
    assert d.complementary == 3


@pytest.mark.parametrize("record", [
    {"date": "2024-01-01", "mainNumbers": [1, 2, 3, 4], "complementaryNumber": 1},
    {"date": "2024-01-01", "mainNumbers": [1, 2, 3, 4, 5, 6], "complementaryNumber": 1},
    {"date": "2024-01-01", "mainNumbers": [1, 1, 3, 4, 5], "complementaryNumber": 1},
    {"date": "2024-01-01", "mainNumbers": [0, 2, 3, 4, 5], "complementaryNumber": 1},
    {"date": "2024-01-01", "mainNumbers": [1, 2, 3, 4, 50], "complementaryNumber": 1},
    {"date": "2024-01-01", "mainNumbers": [1, 2, 3, 4, 5], "complementaryNumber": 0},
    {"date": "2024-01-01", "mainNumbers": [1, 2, 3, 4, 5], "complementaryNumber": 11},
    {"date": "2024-01-01", "mainNumbers": [1, 2, 3, 4, 5]},
    {"date": "2024-01-01", "mainNumbers": [1, 2, 3, 4, 5.5], "complementaryNumber": 1},
    {"date": "2024-01-01", "mainNumbers": [True, 2, 3, 4, 5], "complementaryNumber": 1},
    {"date": "2024-01-01", "mainNumbers": "12345", "complementaryNumber": 1},
    {"date": "2024-13-01", "mainNumbers": [1, 2, 3, 4, 5], "complementaryNumber": 1},
    {"mainNumbers": [1, 2, 3, 4, 5], "complementaryNumber": 1},
    {"date": 20240101, "mainNumbers": [1, 2, 3, 4, 5], "complementaryNumber": 1},
])
def test_invalid_records(record):
    with pytest.raises(InvalidDrawError):
        normalize_draw(record)


def test_non_mapping_record():
    with pytest.raises(InvalidDrawError):
        normalize_draw(["2024-01-01", [1, 2, 3, 4, 5], 1])


def _frame():
    return pd.DataFrame({
        "date": pd.to_datetime(["2024-01-01", "2024-01-08", "2024-01-15"]),
        "num1": [1, 1, 10],
        "num2": [2, 2, 20],
        "num3": [3, 3, None],
        "num4": [4, 4, 40],
        "num5": [5, 5, 49],
        "complementary": [6, 6, 1],
    })


def test_records_from_frame_drops_incomplete_rows_at_build():
    records = records_from_frame(_frame())
    assert records[0] == {"date": "2024-01-01", "mainNumbers": [1, 2, 3, 4, 5],
                          "complementaryNumber": 6}
    assert records[2]["mainNumbers"][2] is None

    index = CacheIndex.build(records)
    assert index.total_draws == 2
    assert index.dropped == 1


def test_records_from_frame_missing_columns():
    with pytest.raises(ValueError):
        records_from_frame(_frame().drop(columns=["complementary"]))


def test_load_draws_csv(tmp_path):
    path = tmp_path / "draws.csv"
    path.write_text(
        "Date,NUM1,num2,num3,num4,num5,Complementary\n"
        "2024-01-01,1,2,3,4,5,6\n"
        "2024-01-08,7,8,9,10,11,2\n"
    )
    records = load_draws_csv(path)
    assert len(records) == 2
    d = normalize_draw(records[1])
    assert d.numbers == (7, 8, 9, 10, 11)
    assert d.complementary == 2
