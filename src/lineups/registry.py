from typing import Dict, Optional, Type

from game.rules import Heuristics, RotationRules

from .base import LineupSelector
from .strict import StrictRotationSelector
from .weighted import WeightedCandidateSelector

SELECTORS: Dict[str, Type[LineupSelector]] = {
    StrictRotationSelector.name: StrictRotationSelector,
    WeightedCandidateSelector.name: WeightedCandidateSelector,
}


def make_selector(
    strategy: str,
    heuristics: Optional[Heuristics] = None,
    seed: Optional[int] = None,
) -> LineupSelector:
    key = str(strategy).strip().lower()
    if key not in SELECTORS:
        raise ValueError(f"Unknown lineup strategy '{strategy}'. Expected one of {sorted(SELECTORS)}")
    return SELECTORS[key].configured(heuristics or Heuristics(), seed=seed)


def selector_for_rules(rules: RotationRules) -> LineupSelector:
    return make_selector(rules.strategy, heuristics=rules.heuristics, seed=rules.seed)
