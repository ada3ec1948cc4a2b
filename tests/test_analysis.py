import numpy as np
import pandas as pd
import pytest

from lotocache.analysis import (
    compare_to_random,
    match_distribution,
    print_summary,
    random_combinations,
    results_frame,
)
from lotocache.batch import BatchRunner
from lotocache.evaluator import validate_combination

pytestmark = pytest.mark.filterwarnings("ignore:Only .* draws in the evaluation window")


def test_results_frame(scenario_index):
    results = BatchRunner().test_multiple_combinations(
        [([1, 2, 3, 4, 5], 6), ([1, 2, 3, 4, 4], 6)], scenario_index)
    df = results_frame(results)
    assert isinstance(df, pd.DataFrame)
    assert len(df) == 2
    assert df.loc[0, "combination"] == "1 2 3 4 5"
    assert df.loc[0, "wins"] == 2
    assert pd.isna(df.loc[0, "error"])
    assert df.loc[1, "error"].startswith("InvalidCombinationError")
    assert np.isnan(df.loc[1, "roi"])


def test_results_frame_empty():
    df = results_frame([])
    assert df.empty
    assert "roi" in df.columns


def test_match_distribution(scenario_index):
    dist = match_distribution([1, 2, 3, 4, 5], 6, scenario_index)
    assert dist["total_draws"] == 3
    assert dist["distribution"][5]["count"] == 2
    assert dist["distribution"][0]["count"] == 1
    assert dist["distribution"][5]["pct"] == pytest.approx(200 / 3)
    assert dist["avg_matches"] == pytest.approx(10 / 3)
    assert dist["best_single"] == 5
    assert dist["complementary_hits"] == 2


def test_match_distribution_empty_window(scenario_index):
    dist = match_distribution([1, 2, 3, 4, 5], 6, scenario_index, start_date="2030-01-01")
    assert dist["total_draws"] == 0
    assert all(d["count"] == 0 for d in dist["distribution"].values())


def test_random_combinations_are_valid_and_seeded():
    a = random_combinations(50, seed=3)
    assert a == random_combinations(50, seed=3)
    assert a != random_combinations(50, seed=4)
    for nums, comp in a:
        validate_combination(nums, comp)


def test_compare_to_random(history_index):
    cmp = compare_to_random([1, 2, 3, 4, 5], 6, history_index, n_random=20, seed=1)
    assert cmp["total_draws"] == history_index.total_draws
    assert cmp["random"]["samples"] == 20 * history_index.total_draws
    assert cmp["candidate"]["samples"] == history_index.total_draws
    sig = cmp["significance"]
    assert set(sig) >= {"t_statistic", "p_value", "mean_diff", "ci_95"}
    lo, hi = sig["ci_95"]
    assert lo <= sig["mean_diff"] <= hi
    assert cmp == compare_to_random([1, 2, 3, 4, 5], 6, history_index, n_random=20, seed=1)


def test_compare_candidate_rate_matches_test_result(history_index):
    runner = BatchRunner()
    cmp = compare_to_random([8, 16, 24, 32, 40], 4, history_index, runner=runner, n_random=5)
    r = runner.test_combination([8, 16, 24, 32, 40], 4, history_index)
    assert cmp["candidate"]["win_rate"] == pytest.approx(r.win_rate)
    assert cmp["candidate"]["mean_gain"] == pytest.approx(r.total_gains / r.total_tests)


def test_compare_without_draws(scenario_index):
    cmp = compare_to_random([1, 2, 3, 4, 5], 6, scenario_index, n_random=5, max_draws=0)
    assert cmp["candidate"]["samples"] == 0
    assert "significance" not in cmp


def test_print_summary(capsys, scenario_index):
    runner = BatchRunner()
    r = runner.test_combination([1, 2, 3, 4, 5], 6, scenario_index)
    dist = match_distribution([1, 2, 3, 4, 5], 6, scenario_index)
    print_summary(r, distribution=dist)
    out = capsys.readouterr().out
    assert "Draws tested: 3" in out
    assert "5+complementary: 2" in out
    assert "ROI:" in out
    assert "5 matches: 2" in out
