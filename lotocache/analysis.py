"""
Result analysis for combination tests.

Tabulates batch results as a DataFrame, breaks a combination's matches
down by count, and checks whether a combination's historical payouts stand
out from randomly drawn combinations over the same draws (Welch t-test).
None of this says anything about future draws; it only describes how a
combination would have fared against recorded history.
"""
import numpy as np
import pandas as pd
from scipy import stats

from lotocache.batch import BatchRunner
from lotocache.config import (
    COMPLEMENTARY_MAX,
    COMPLEMENTARY_MIN,
    MAIN_COUNT,
    MAIN_MAX,
    MAIN_MIN,
)
from lotocache.evaluator import validate_combination

ALL_NUMBERS = np.arange(MAIN_MIN, MAIN_MAX + 1)
RESULT_COLUMNS = [
    "combination", "complementary", "total_tests", "wins", "win_rate",
    "total_gains", "average_gain", "roi", "error",
]


def results_frame(results) -> pd.DataFrame:
    """One row per slot of test_multiple_combinations() output."""
    rows = []
    for r in results:
        if r.ok:
            rows.append({
                "combination": " ".join(str(n) for n in r.combination),
                "complementary": r.complementary,
                "total_tests": r.total_tests,
                "wins": r.wins,
                "win_rate": r.win_rate,
                "total_gains": r.total_gains,
                "average_gain": r.average_gain,
                "roi": r.roi,
                "error": None,
            })
        else:
            combo = r.combination
            if isinstance(combo, (list, tuple)):
                combo = " ".join(str(n) for n in combo)
            rows.append({
                "combination": combo,
                "complementary": r.complementary,
                "total_tests": 0,
                "wins": 0,
                "win_rate": np.nan,
                "total_gains": np.nan,
                "average_gain": np.nan,
                "roi": np.nan,
                "error": f"{r.error_type}: {r.error}",
            })
    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


def _outcomes(runner, combo, draws):
    """Per-draw arrays: main matches, complementary hit, gain, win."""
    matches, compl, gains, wins = [], [], [], []
    for _, match, tier, won in runner.scan(combo, draws):
        matches.append(match.main_matches)
        compl.append(match.complementary_match)
        gains.append(tier.payout if won else 0.0)
        wins.append(won)
    return (np.array(matches, dtype=int), np.array(compl, dtype=bool),
            np.array(gains, dtype=float), np.array(wins, dtype=bool))


def match_distribution(numbers, complementary, index, runner=None,
                       max_draws=None, start_date=None, end_date=None):
    """
    Count draws by number of main matches (0-5) for one combination.

    Returns
    -------
    dict with distribution {m: {"count", "pct"}}, avg_matches, std_matches,
    best_single, complementary_hits and total_draws.
    """
    runner = runner or BatchRunner()
    combo = validate_combination(numbers, complementary)
    draws = runner.select_draws(index, max_draws, start_date, end_date)
    matches, compl, _, _ = _outcomes(runner, combo, draws)

    n = len(matches)
    counts = np.bincount(matches, minlength=MAIN_COUNT + 1) if n else np.zeros(MAIN_COUNT + 1, int)
    dist = {
        m: {"count": int(counts[m]), "pct": float(100 * counts[m] / n) if n else 0.0}
        for m in range(MAIN_COUNT + 1)
    }
    return {
        "distribution": dist,
        "avg_matches": float(np.mean(matches)) if n else 0.0,
        "std_matches": float(np.std(matches)) if n else 0.0,
        "best_single": int(matches.max()) if n else 0,
        "complementary_hits": int(compl.sum()),
        "total_draws": n,
    }


def random_combinations(n, seed=0):
    """n valid random (numbers, complementary) pairs from a seeded generator."""
    rng = np.random.default_rng(seed)
    combos = []
    for _ in range(n):
        nums = sorted(int(x) for x in rng.choice(ALL_NUMBERS, MAIN_COUNT, replace=False))
        comp = int(rng.integers(COMPLEMENTARY_MIN, COMPLEMENTARY_MAX + 1))
        combos.append((nums, comp))
    return combos


def _nan_to_none(value, digits):
    value = float(value)
    if np.isnan(value):
        return None
    return round(value, digits)


def compare_to_random(numbers, complementary, index, runner=None, n_random=100, seed=0,
                      max_draws=None, start_date=None, end_date=None):
    """
    Compare a combination's per-draw gains with n_random random combinations
    over the same draws.

    Returns
    -------
    dict with "candidate" and "random" summaries (mean_gain, std_gain,
    win_rate) and "significance" (Welch t-test, mean difference, 95% CI),
    the latter only when both samples have more than one value.
    """
    runner = runner or BatchRunner()
    combo = validate_combination(numbers, complementary)
    draws = runner.select_draws(index, max_draws, start_date, end_date)

    _, _, cand_gains, cand_wins = _outcomes(runner, combo, draws)

    base_gains, base_wins = [], []
    for nums, comp in random_combinations(n_random, seed):
        _, _, g, w = _outcomes(runner, validate_combination(nums, comp), draws)
        base_gains.append(g)
        base_wins.append(w)
    base_gains = np.concatenate(base_gains) if base_gains else np.array([], dtype=float)
    base_wins = np.concatenate(base_wins) if base_wins else np.array([], dtype=bool)

    def _summary(gains, wins):
        if len(gains) == 0:
            return {"mean_gain": 0.0, "std_gain": 0.0, "win_rate": 0.0, "samples": 0}
        return {
            "mean_gain": float(np.mean(gains)),
            "std_gain": float(np.std(gains)),
            "win_rate": 100 * float(np.mean(wins)),
            "samples": int(len(gains)),
        }

    result = {
        "candidate": _summary(cand_gains, cand_wins),
        "random": _summary(base_gains, base_wins),
        "n_random": n_random,
        "total_draws": len(draws),
    }

    if len(cand_gains) > 1 and len(base_gains) > 1:
        t_stat, p_value = stats.ttest_ind(cand_gains, base_gains, equal_var=False)
        diff = float(np.mean(cand_gains) - np.mean(base_gains))
        se = np.sqrt(np.var(cand_gains) / len(cand_gains) + np.var(base_gains) / len(base_gains))
        p = _nan_to_none(p_value, 6)
        result["significance"] = {
            "t_statistic": _nan_to_none(t_stat, 4),
            "p_value": p,
            "significant_at_005": p is not None and p < 0.05,
            "significant_at_010": p is not None and p < 0.10,
            "mean_diff": round(diff, 4),
            "ci_95": (round(diff - 1.96 * se, 4), round(diff + 1.96 * se, 4)),
        }
    return result


def print_summary(result, distribution=None, comparison=None):
    """Print a formatted report for one TestResult."""
    print(f"\n{'='*60}")
    print("COMBINATION TEST")
    print(f"{'='*60}")
    nums = ", ".join(str(n) for n in result.combination)
    print(f"  Numbers: {nums} + Complementary: {result.complementary}")
    print(f"  Draws tested: {result.total_tests}")
    print(f"  Wins: {result.wins} ({result.win_rate:.2f}%)")
    print(f"  Total gains: {result.total_gains:,.2f}")
    print(f"  Average gain per win: {result.average_gain:,.2f}")
    print(f"  ROI: {result.roi:+.2f}%")

    if result.categories:
        print("\n  Prize tiers:")
        for label, count in sorted(result.categories.items(), key=lambda kv: -kv[1]):
            print(f"    {label}: {count}")

    if distribution:
        print("\n  Match distribution:")
        for m, d in distribution["distribution"].items():
            print(f"    {m} matches: {d['count']} ({d['pct']:.1f}%)")
        print(f"  Average matches: {distribution['avg_matches']:.3f} / {MAIN_COUNT}")

    if comparison:
        c, r = comparison["candidate"], comparison["random"]
        print(f"\n  RANDOM BASELINE ({comparison['n_random']} combinations):")
        print(f"    Mean gain per draw: {c['mean_gain']:.3f} vs {r['mean_gain']:.3f}")
        print(f"    Win rate: {c['win_rate']:.2f}% vs {r['win_rate']:.2f}%")
        sig = comparison.get("significance")
        if sig:
            print(f"    t-statistic: {sig['t_statistic']}")
            print(f"    p-value: {sig['p_value']}")
            ci = sig["ci_95"]
            print(f"    95% CI: ({ci[0]}, {ci[1]})")
            if sig["significant_at_005"]:
                print("    Significant at p < 0.05")
            elif sig["significant_at_010"]:
                print("    Marginally significant at p < 0.10")
            else:
                print("    Not statistically significant")

    print(f"\n  Execution time: {result.execution_time_ms:.1f}ms")
    print(f"{'='*60}")
