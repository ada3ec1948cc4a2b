import copy
import random
from datetime import date, timedelta

import pytest

from lotocache.batch import BatchRunner
from lotocache.cache_index import CacheIndex
from lotocache.tiers import PrizeTier

SCENARIO_DRAWS = [
    {"date": "2024-01-01", "mainNumbers": [1, 2, 3, 4, 5], "complementaryNumber": 6},
    {"date": "2024-01-08", "mainNumbers": [1, 2, 3, 4, 5], "complementaryNumber": 6},
    {"date": "2024-01-15", "mainNumbers": [10, 20, 30, 40, 49], "complementaryNumber": 1},
]


def make_history(n=250, seed=7, start=date(2019, 1, 7)):
    """n weekly draws with seeded random numbers."""
    rng = random.Random(seed)
    draws = []
    for i in range(n):
        d = start + timedelta(days=7 * i)
        draws.append({
            "date": d.isoformat(),
            "mainNumbers": rng.sample(range(1, 50), 5),
            "complementaryNumber": rng.randint(1, 10),
        })
    return draws


@pytest.fixture
def scenario_draws():
    return copy.deepcopy(SCENARIO_DRAWS)


@pytest.fixture
def scenario_index(scenario_draws):
    return CacheIndex.build(scenario_draws)


@pytest.fixture
def history():
    return make_history()


@pytest.fixture
def history_index(history):
    return CacheIndex.build(history)


@pytest.fixture
def runner():
    return BatchRunner()


@pytest.fixture
def flat_table():
    """Synthetic rules: every tier pays its match count, complementary ignored."""
    return tuple(
        PrizeTier(label=f"{m} any", main_matches=m, complementary=None, payout=float(m))
        for m in range(1, 6)
    )
