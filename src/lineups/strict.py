# src/lineups/strict.py
"""
Strict rotation lineup selector.

Fills the lineup one player at a time from whoever has played the fewest
completed periods. Ties go to a player whose position is not yet on the
floor ("Any" never counts), then to the higher skill level. The result keeps
the period-count spread across present players as tight as the roster allows.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from analysis.exposure import count_periods_played
from game.models import GameSettings, LineupSuggestion, Period, Player
from game.rules import Heuristics
from schema import ANY

from .base import LineupSelector, average_skill, eligible_players, position_balance

logger = logging.getLogger(__name__)


class StrictRotationSelector(LineupSelector):
    name = "strict"

    def __init__(self, rotation_spread_penalty: float = 0.33) -> None:
        self.rotation_spread_penalty = rotation_spread_penalty

    @classmethod
    def configured(cls, heuristics: Heuristics, seed: Optional[int] = None) -> "StrictRotationSelector":
        # no randomness, seed unused
        return cls(rotation_spread_penalty=heuristics.rotation_spread_penalty)

    def select_lineup(
        self,
        players: Sequence[Player],
        settings: GameSettings,
        periods: Sequence[Period],
    ) -> LineupSuggestion:
        present = eligible_players(players, settings)
        counts = count_periods_played(present, periods)

        lineup = self._fill_lineup(present, counts, settings.players_on_court)

        suggestion = LineupSuggestion(
            players=tuple(lineup),
            average_skill_level=average_skill(lineup),
            playing_time_balance=self.rotation_balance(counts, lineup),
            position_balance=position_balance(lineup),
        )
        logger.debug(
            "strict lineup %s (rotation balance %.2f, position balance %.2f)",
            suggestion.player_ids, suggestion.playing_time_balance, suggestion.position_balance,
        )
        return suggestion

    def _fill_lineup(self, present: List[Player], counts: Dict[str, int], size: int) -> List[Player]:
        # fewest periods first, higher skill first within a count; stable on roster order
        available = sorted(present, key=lambda p: (counts[p.id], -p.skill_level))
        lineup: List[Player] = []

        while len(lineup) < size and available:
            fewest = min(counts[p.id] for p in available)
            tied = [p for p in available if counts[p.id] == fewest]
            picked = tied[0] if len(tied) == 1 else self._break_tie(tied, lineup)
            lineup.append(picked)
            available.remove(picked)

        return lineup

    @staticmethod
    def _break_tie(tied: List[Player], lineup: List[Player]) -> Player:
        on_floor = {p.position for p in lineup if p.position != ANY}
        for p in tied:
            if p.position != ANY and p.position not in on_floor:
                return p
        # max() keeps the first of equal skills
        return max(tied, key=lambda p: p.skill_level)

    def rotation_balance(self, counts: Dict[str, int], lineup: Sequence[Player]) -> float:
        projected = dict(counts)
        for p in lineup:
            projected[p.id] = projected.get(p.id, 0) + 1
        values = list(projected.values())
        spread = max(values) - min(values)
        return max(0.0, 1.0 - spread * self.rotation_spread_penalty)
