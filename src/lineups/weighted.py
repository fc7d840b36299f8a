# -*- coding: utf-8 -*-
r"""Weighted-candidate lineup selector

Builds several greedy candidate lineups and keeps the best-scoring one.

Greedy step: every remaining player is scored as
    time_weight * (how far below the roster's max playing time)
  + position_weight (once, if the player's position is not on the floor yet)
  + skill_weight * (5 - |lineup skill sum - team avg * lineup size|)
Candidate score:
    0.75 * time balance + 0.15 * position balance + 0.10 * skill balance
Time balance is 1 - sqrt(avg deviation / period duration), so small
deviations already cost noticeably.
"""

from __future__ import annotations

import functools
import logging
import math
import random
from typing import Dict, List, Optional, Sequence

from analysis.fairness import target_time_per_player
from game.models import GameSettings, LineupSuggestion, Period, Player
from game.rules import Heuristics
from schema import ANY, SKILL_MAX, SKILL_MIN

from .base import LineupSelector, average_skill, eligible_players, position_balance

logger = logging.getLogger(__name__)

# widest possible skill variance for a 1-5 scale: half at 1, half at 5
_MAX_SKILL_VARIANCE = ((SKILL_MAX - SKILL_MIN) / 2) ** 2


class WeightedCandidateSelector(LineupSelector):
    name = "weighted"

    def __init__(
        self,
        heuristics: Optional[Heuristics] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.heuristics = heuristics or Heuristics()
        self.seed = seed
        self.rng = rng

    @classmethod
    def configured(cls, heuristics: Heuristics, seed: Optional[int] = None) -> "WeightedCandidateSelector":
        return cls(heuristics=heuristics, seed=seed)

    # =============================================================================
    # 1) Entry point
    # =============================================================================
    def select_lineup(
        self,
        players: Sequence[Player],
        settings: GameSettings,
        periods: Sequence[Period],
    ) -> LineupSuggestion:
        present = eligible_players(players, settings)
        rng = self.rng if self.rng is not None else random.Random(self.seed)

        target = target_time_per_player(settings, len(present))
        deficits = {p.id: target - p.total_playing_time for p in present}

        candidates = self.build_candidates(present, settings.players_on_court, rng)

        best: List[Player] = candidates[0]
        best_score = -math.inf
        for lu in candidates:
            s = self.evaluate(lu, deficits, settings)
            if s > best_score:
                best_score, best = s, lu

        suggestion = LineupSuggestion(
            players=tuple(best),
            average_skill_level=average_skill(best),
            playing_time_balance=self.time_balance(best, deficits, settings),
            position_balance=position_balance(best),
        )
        logger.debug(
            "weighted lineup %s from %d candidates (score %.3f)",
            suggestion.player_ids, len(candidates), best_score,
        )
        return suggestion

    # =============================================================================
    # 2) Candidate generation (greedy with light perturbation)
    # =============================================================================
    def priority_order(self, present: List[Player]) -> List[Player]:
        eps = self.heuristics.time_tie_epsilon

        def cmp(a: Player, b: Player) -> int:
            diff = a.total_playing_time - b.total_playing_time
            if abs(diff) < eps:
                return b.skill_level - a.skill_level
            return -1 if diff < 0 else 1

        return sorted(present, key=functools.cmp_to_key(cmp))

    def build_candidates(self, present: List[Player], size: int, rng: random.Random) -> List[List[Player]]:
        ordered = self.priority_order(present)
        outs: List[List[Player]] = []
        for attempt in range(self.heuristics.candidate_count):
            lu = self.build_one(ordered, present, size, attempt, rng)
            if len(lu) == size:
                outs.append(lu)
        return outs

    def build_one(
        self,
        ordered: List[Player],
        present: List[Player],
        size: int,
        attempt: int,
        rng: random.Random,
    ) -> List[Player]:
        available = ordered[:]
        # first attempt is the pure greedy order; later ones swap a few players to the front
        for _ in range(min(self.heuristics.perturbation_swaps, attempt)):
            j = rng.randrange(len(available))
            available[0], available[j] = available[j], available[0]

        max_time = max(p.total_playing_time for p in present)
        team_avg_skill = average_skill(present)
        target_skill_sum = team_avg_skill * size

        chosen: List[Player] = []
        while len(chosen) < size and available:
            picked = max(
                available,
                key=lambda p: self.greedy_score(p, chosen, max_time, target_skill_sum),
            )
            chosen.append(picked)
            available.remove(picked)
        return chosen

    def greedy_score(
        self,
        player: Player,
        chosen: List[Player],
        max_time: float,
        target_skill_sum: float,
    ) -> float:
        h = self.heuristics
        if max_time > 0:
            time_score = (max_time - player.total_playing_time) / max_time
        else:
            time_score = 1.0
        score = time_score * h.time_weight

        on_floor = {p.position for p in chosen}
        if player.position != ANY and player.position not in on_floor:
            score += h.position_weight

        skill_sum = sum(p.skill_level for p in chosen) + player.skill_level
        score += (SKILL_MAX - abs(skill_sum - target_skill_sum)) * h.skill_weight
        return score

    # =============================================================================
    # 3) Candidate scoring
    # =============================================================================
    def evaluate(self, lineup: List[Player], deficits: Dict[str, float], settings: GameSettings) -> float:
        h = self.heuristics
        return (
            self.time_balance(lineup, deficits, settings) * h.time_balance_weight
            + position_balance(lineup) * h.position_balance_weight
            + self.skill_balance(lineup) * h.skill_balance_weight
        )

    @staticmethod
    def time_balance(lineup: Sequence[Player], deficits: Dict[str, float], settings: GameSettings) -> float:
        # how far each player's remaining deficit is from one period's worth of minutes
        deviations = [abs(deficits.get(p.id, 0.0) - settings.period_duration) for p in lineup]
        avg = sum(deviations) / len(deviations)
        normalized = avg / settings.period_duration
        return max(0.0, 1.0 - math.sqrt(normalized))

    @staticmethod
    def skill_balance(lineup: Sequence[Player]) -> float:
        skills = [p.skill_level for p in lineup]
        avg = sum(skills) / len(skills)
        variance = sum((s - avg) ** 2 for s in skills) / len(skills)
        return max(0.0, 1.0 - variance / _MAX_SKILL_VARIANCE)
