# -*- coding: utf-8 -*-
r"""Rotation lineups for one game, from the command line

Simulates a game: every regulation period gets a suggested lineup, which is
committed and completed at full length, then the fairness reports are printed.

Usage:
  python src/cli_make_lineups.py --roster data/sample_roster.csv --rules rules/basketball/house_league.yaml --out output/lineups.csv

Defaults for --rules / --strategy / --seed can come from .env:
  ROTATION_RULES, LINEUP_STRATEGY, ROTATION_SEED
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd
from dotenv import load_dotenv

from game.errors import LineupError
from game.manager import GameManager
from game.models import Game, Period
from game.rules import load_rules
from lineups.registry import make_selector
from sources.normalize import DEFAULT_MAPPING, load_column_mapping, load_roster_csv

ROOT = Path(__file__).resolve().parents[1]


def export_lineups(periods: List[Period], out_csv: str) -> Path:
    rows = []
    for period in periods:
        for p in period.lineup:
            rows.append({
                "Period": period.number,
                "PlayerID": p.id,
                "Name": p.name,
                "Jersey": p.jersey_number,
                "Position": p.position,
                "Skill": p.skill_level,
                "Minutes": period.actual_duration,
            })
    out_path = Path(out_csv)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(rows).to_csv(out_path, index=False, encoding="utf-8-sig")
    return out_path


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    load_dotenv()
    seed_env = os.getenv("ROTATION_SEED")

    ap = argparse.ArgumentParser(description="Balanced basketball rotation lineups")
    ap.add_argument("--roster", dest="roster_csv", required=True)
    ap.add_argument("--rules", dest="rules_yaml",
                    default=os.getenv("ROTATION_RULES", str(ROOT / "rules/basketball/house_league.yaml")))
    ap.add_argument("--columns", dest="columns_yaml", default=None, help="Roster column alias yaml (optional)")
    ap.add_argument("--strategy", choices=["strict", "weighted"], default=os.getenv("LINEUP_STRATEGY"))
    ap.add_argument("--seed", type=int, default=int(seed_env) if seed_env else None)
    ap.add_argument("--absent", nargs="*", default=[], help="Player ids to mark absent")
    ap.add_argument("--periods", type=int, default=None, help="Periods to simulate (default: regulation)")
    ap.add_argument("--out", dest="out_csv", default=None)
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    a = parse_args(argv)

    try:
        rules = load_rules(a.rules_yaml)
        mapping = load_column_mapping(a.columns_yaml) if a.columns_yaml else DEFAULT_MAPPING
        roster = load_roster_csv(a.roster_csv, mapping)
    except (FileNotFoundError, ValueError) as e:
        print(f"[error] {e}", file=sys.stderr)
        return 1

    strategy = a.strategy or rules.strategy
    seed = a.seed if a.seed is not None else rules.seed
    selector = make_selector(strategy, heuristics=rules.heuristics, seed=seed)

    game = Game(id="game-1", team_id=rules.name, settings=rules.settings, roster=roster)
    manager = GameManager(game, selector=selector, heuristics=rules.heuristics)
    try:
        for pid in a.absent:
            manager.mark_present(pid, False)
    except LineupError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 1

    n_periods = a.periods if a.periods is not None else rules.settings.periods_count
    if n_periods < 0:
        print(f"[error] --periods must be >= 0, got {n_periods}", file=sys.stderr)
        return 1
    print(f"[ok] rules={rules.name} strategy={strategy} present={sum(p.is_present for p in roster)}")

    try:
        suggestion = manager.start_game()
        for i in range(n_periods):
            if i > 0:
                suggestion = manager.generate_next_lineup()
            period = manager.commit_suggestion(suggestion)
            manager.complete_period(period.id)
            names = ", ".join(f"#{p.jersey_number} {p.name}" for p in period.lineup)
            print(f"[period {period.number}] {names}  "
                  f"(balance {suggestion.playing_time_balance:.2f}, positions {suggestion.position_balance:.2f})")
    except LineupError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 1
    finally:
        manager.end_game()

    report = manager.period_report()
    print(report[["player_name", "played", "target", "difference"]].to_string(index=False))
    summary = manager.summary()
    print(f"[ok] time balance {summary['time_balance']:.3f}, avg minutes {summary['average_playing_time']:.1f}")

    if a.out_csv:
        out_path = export_lineups(game.periods, a.out_csv)
        print(f"[ok] wrote {out_path}  ({len(game.periods)} period(s))")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
