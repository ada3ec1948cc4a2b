#!/usr/bin/env python3
"""
Test one combination, or a file of combinations, against a draws CSV.

    python scripts/evaluate_combination.py data/draws.csv --numbers 1 2 3 4 5 --complementary 6
    python scripts/evaluate_combination.py data/draws.csv --batch combos.csv --max-draws 1000

The draws CSV needs the columns date, num1-num5, complementary. A batch CSV
needs num1-num5 and complementary.
"""
import argparse
import json
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pandas as pd

from lotocache.analysis import compare_to_random, match_distribution, print_summary, results_frame
from lotocache.batch import BatchRunner
from lotocache.config import Settings
from lotocache.draws import NUM_COLS, load_draws_csv
from lotocache.errors import LotoCacheError
from lotocache.service import DrawCacheService
from lotocache.tiers import load_tier_table


def load_combinations_csv(path):
    df = pd.read_csv(path)
    df.columns = df.columns.str.lower().str.strip()
    missing = [c for c in NUM_COLS + ["complementary"] if c not in df.columns]
    if missing:
        raise ValueError(f"combinations file is missing columns: {missing}")
    return [
        {"numbers": [int(row[c]) for c in NUM_COLS], "complementary": int(row["complementary"])}
        for _, row in df.iterrows()
    ]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Evaluate lottery combinations against draw history")
    p.add_argument("draws", help="CSV with date, num1-num5, complementary")
    p.add_argument("--numbers", type=int, nargs=5, metavar="N", help="5 main numbers (1-49)")
    p.add_argument("--complementary", type=int, help="complementary number (1-10)")
    p.add_argument("--batch", help="CSV of combinations (num1-num5, complementary)")
    p.add_argument("--max-draws", type=int, default=None, help="test only the newest N draws")
    p.add_argument("--start-date", default=None, help="YYYY-MM-DD, inclusive")
    p.add_argument("--end-date", default=None, help="YYYY-MM-DD, inclusive")
    p.add_argument("--tier-table", default=None, help="CSV prize tier table")
    p.add_argument("--baseline", type=int, default=0,
                   help="compare against N random combinations")
    p.add_argument("--deadline", type=float, default=None,
                   help="batch time budget in seconds")
    p.add_argument("--output", default=None, help="write batch results to this CSV")
    p.add_argument("--json", action="store_true", help="print JSON instead of a report")
    p.add_argument("--verbose", action="store_true", help="enable INFO logging")
    return p


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.batch is None and (args.numbers is None or args.complementary is None):
        print("Either --numbers with --complementary, or --batch, is required", file=sys.stderr)
        return 2

    try:
        return _run(args)
    except (LotoCacheError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _run(args):
    kwargs = {}
    if args.tier_table:
        kwargs["tier_table"] = load_tier_table(args.tier_table)
    runner = BatchRunner.from_settings(Settings.from_env(), **kwargs)
    service = DrawCacheService(source=lambda: load_draws_csv(args.draws), runner=runner)

    stats = service.build_index()
    if not args.json:
        start, end = stats.date_range
        print(f"Loaded {stats.total_draws} draws ({start} to {end}), "
              f"{stats.dropped} dropped, built in {stats.build_time_ms:.1f}ms "
              f"(~{stats.memory_usage})")

    window = {"max_draws": args.max_draws, "start_date": args.start_date,
              "end_date": args.end_date}

    if args.batch:
        combos = load_combinations_csv(args.batch)
        results = service.test_multiple_combinations(combos, deadline=args.deadline, **window)
        if args.json:
            print(json.dumps([r.to_dict() for r in results], indent=2))
        else:
            df = results_frame(results)
            print(df.to_string(index=False))
        if args.output:
            results_frame(results).to_csv(args.output, index=False)
            if not args.json:
                print(f"\nResults saved to {args.output}")
        return 0

    result = service.test_combination(args.numbers, args.complementary, **window)
    comparison = None
    if args.baseline > 0:
        comparison = compare_to_random(args.numbers, args.complementary, service.index,
                                       runner=runner, n_random=args.baseline, **window)
    if args.json:
        payload = result.to_dict()
        if comparison:
            payload["baseline"] = comparison
        print(json.dumps(payload, indent=2))
    else:
        dist = match_distribution(args.numbers, args.complementary, service.index,
                                  runner=runner, **window)
        print_summary(result, distribution=dist, comparison=comparison)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
