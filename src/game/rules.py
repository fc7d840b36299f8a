# src/game/rules.py
# Rule sets for youth/house-league games (rules/basketball/*.yaml)
#
# YAML format:
#   name, game: {periods_count, period_duration, overtime_periods, players_on_court}
#   strategy: strict | weighted
#   seed: int (weighted strategy only)
#   heuristics:
#     late_arrival_credit, rotation_spread_penalty, candidate_count,
#     time_tie_epsilon, perturbation_swaps,
#     weights: {time, position, skill}
#     score_weights: {time_balance, position_balance, skill_balance}
#
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

import yaml

from .models import GameSettings

STRATEGIES = ("strict", "weighted")

# ----------------------------
# Utilities
# ----------------------------

def _as_upper(s: Any) -> str:
    return str(s).strip().upper()

def _safe_int(x: Any, default: Optional[int]) -> Optional[int]:
    try:
        if x is None:
            return default
        return int(x)
    except (TypeError, ValueError):
        return default

def _safe_float(x: Any, default: float) -> float:
    try:
        if x is None:
            return default
        return float(x)
    except (TypeError, ValueError):
        return default

# ----------------------------
# Rules model
# ----------------------------

@dataclass(frozen=True)
class Heuristics:
    late_arrival_credit: float = 0.7       # share of expected minutes credited to a late arrival
    rotation_spread_penalty: float = 0.33  # balance lost per period of max/min spread
    candidate_count: int = 15
    time_tie_epsilon: float = 0.1          # minutes
    perturbation_swaps: int = 3
    time_weight: float = 10.0
    position_weight: float = 1.5
    skill_weight: float = 0.3
    time_balance_weight: float = 0.75
    position_balance_weight: float = 0.15
    skill_balance_weight: float = 0.10

@dataclass(frozen=True)
class RotationRules:
    name: str
    settings: GameSettings
    strategy: str = "strict"
    seed: Optional[int] = None
    heuristics: Heuristics = field(default_factory=Heuristics)


def _parse_heuristics(raw: dict) -> Heuristics:
    d = Heuristics()
    weights = raw.get("weights") or {}
    score_weights = raw.get("score_weights") or {}
    h = Heuristics(
        late_arrival_credit=_safe_float(raw.get("late_arrival_credit"), d.late_arrival_credit),
        rotation_spread_penalty=_safe_float(raw.get("rotation_spread_penalty"), d.rotation_spread_penalty),
        candidate_count=_safe_int(raw.get("candidate_count"), d.candidate_count),
        time_tie_epsilon=_safe_float(raw.get("time_tie_epsilon"), d.time_tie_epsilon),
        perturbation_swaps=_safe_int(raw.get("perturbation_swaps"), d.perturbation_swaps),
        time_weight=_safe_float(weights.get("time"), d.time_weight),
        position_weight=_safe_float(weights.get("position"), d.position_weight),
        skill_weight=_safe_float(weights.get("skill"), d.skill_weight),
        time_balance_weight=_safe_float(score_weights.get("time_balance"), d.time_balance_weight),
        position_balance_weight=_safe_float(score_weights.get("position_balance"), d.position_balance_weight),
        skill_balance_weight=_safe_float(score_weights.get("skill_balance"), d.skill_balance_weight),
    )
    if not 0.0 <= h.late_arrival_credit <= 1.0:
        raise ValueError(f"late_arrival_credit must be within 0..1: {h.late_arrival_credit}")
    if h.candidate_count <= 0:
        raise ValueError(f"candidate_count must be positive: {h.candidate_count}")
    if h.perturbation_swaps < 0:
        raise ValueError(f"perturbation_swaps must be >= 0: {h.perturbation_swaps}")
    return h


def parse_rules(raw: dict, default_name: str = "default") -> RotationRules:
    """Build RotationRules from an already-loaded YAML mapping."""
    game = raw.get("game") or {}
    d = GameSettings()
    settings = GameSettings(
        periods_count=_safe_int(game.get("periods_count"), d.periods_count),
        period_duration=_safe_float(game.get("period_duration"), d.period_duration),
        overtime_periods=_safe_int(game.get("overtime_periods"), d.overtime_periods),
        players_on_court=_safe_int(game.get("players_on_court"), d.players_on_court),
    )

    strategy = str(raw.get("strategy") or "strict").strip().lower()
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown lineup strategy '{strategy}'. Expected one of {STRATEGIES}")

    return RotationRules(
        name=str(raw.get("name") or default_name),
        settings=settings,
        strategy=strategy,
        seed=_safe_int(raw.get("seed"), None),
        heuristics=_parse_heuristics(raw.get("heuristics") or {}),
    )


def load_rules(rules_yaml: str | Path) -> RotationRules:
    p = Path(rules_yaml).resolve()
    if not p.exists():
        raise FileNotFoundError(f"rules yaml not found: {p}")
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Rules file {p} must contain a mapping")
    return parse_rules(data, default_name=p.stem)


def list_rule_sets(rules_dir: str | Path) -> List[str]:
    """List rule set names by scanning rules_dir for *.yaml files."""
    d = Path(rules_dir)
    if not d.exists():
        return []
    names = []
    for p in sorted(d.glob("*.yaml")):
        try:
            with p.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError:
            data = {}
        # files that are not a mapping are listed by filename
        if isinstance(data, dict) and data.get("name"):
            names.append(str(data["name"]))
        else:
            names.append(p.stem)
    return names


def find_rules(rules_dir: str | Path, name: str) -> RotationRules:
    """
    Matches by:
      1) exact filename: <name>.yaml (case-insensitive)
      2) any yaml whose 'name' field equals the requested name (case-insensitive)
    """
    d = Path(rules_dir)
    if not d.exists():
        raise FileNotFoundError(f"Rules directory not found: {d}")

    wanted = _as_upper(name)
    candidates = sorted(d.glob("*.yaml"))
    for p in candidates:
        if _as_upper(p.stem) == wanted:
            return load_rules(p)

    for p in candidates:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            continue
        if _as_upper(data.get("name")) == wanted:
            return parse_rules(data, default_name=p.stem)

    raise FileNotFoundError(f"No rules yaml found for '{name}'. Looked in: {d}")
