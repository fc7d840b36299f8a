# src/game/manager.py
# Game state coordinator: attendance, periods, swaps, settings, reports.
#
# Example usage:
#   from game.manager import GameManager
#   manager = GameManager(game, selector=make_selector("strict"))
#   suggestion = manager.start_game()
#   period = manager.commit_suggestion(suggestion)
#   manager.complete_period(period.id)
#
from __future__ import annotations

import logging
import math
from typing import Any, Dict, Optional

import pandas as pd

from analysis.exposure import calculate_exposure
from analysis.fairness import game_summary, period_report, playing_time_report
from lineups.base import LineupSelector
from lineups.strict import StrictRotationSelector

from .errors import (
    InsufficientPlayers,
    InvalidLineup,
    InvalidSwap,
    PeriodAlreadyCompleted,
    UnknownPeriod,
)
from .models import Game, GameSettings, LineupSuggestion, Period, Player
from .roster import find_player, present_players
from .rules import Heuristics

logger = logging.getLogger(__name__)


class GameManager:
    """
    Single writer for one Game. Every mutation happens in place on `self.game`
    and the touched object is returned. Selectors only read the game.
    """

    def __init__(
        self,
        game: Game,
        selector: Optional[LineupSelector] = None,
        heuristics: Optional[Heuristics] = None,
    ) -> None:
        self.game = game
        self.heuristics = heuristics or Heuristics()
        self.selector = selector or StrictRotationSelector(
            rotation_spread_penalty=self.heuristics.rotation_spread_penalty
        )

    # --------
    # Lookups
    # --------
    def get_period(self, period_id: str) -> Period:
        for p in self.game.periods:
            if p.id == period_id:
                return p
        raise UnknownPeriod(f"No period with id {period_id!r} in game {self.game.id}")

    # --------
    # Attendance
    # --------
    def mark_present(self, player_id: str, present: bool = True) -> Player:
        player = find_player(self.game.roster, player_id)
        player.is_present = present
        return player

    def add_late_player(self, player_id: str) -> Player:
        """
        Mark a latecomer present and credit catch-up minutes:
        late_arrival_credit * (average minutes a present player has accrued so far).
        Keeps the newcomer from monopolizing the next lineups.
        """
        player = self.mark_present(player_id, True)

        completed = len(self.game.completed_periods)
        if completed == 0:
            return player

        s = self.game.settings
        present = len(present_players(self.game.roster))
        avg_time_per_period = s.period_duration * s.players_on_court / present
        expected = avg_time_per_period * completed
        credit = max(0.0, expected * self.heuristics.late_arrival_credit)

        # playing time never goes backwards
        player.total_playing_time = max(player.total_playing_time, credit)
        logger.info("late arrival %s credited %.2f min after %d periods", player.id, credit, completed)
        return player

    # --------
    # Game lifecycle
    # --------
    def start_game(self) -> LineupSuggestion:
        present = len(present_players(self.game.roster))
        required = self.game.settings.players_on_court
        if present < required:
            raise InsufficientPlayers(present, required)
        self.game.is_active = True
        logger.info("game %s started with %d present players", self.game.id, present)
        return self.generate_next_lineup()

    def end_game(self) -> Game:
        self.game.is_active = False
        return self.game

    def game_progress(self) -> Dict[str, float]:
        s = self.game.settings
        completed = len(self.game.completed_periods)
        total = s.total_periods
        return {
            "completed_periods": completed,
            "total_periods": total,
            "time_remaining": (total - completed) * s.period_duration,
        }

    # --------
    # Periods
    # --------
    def generate_next_lineup(self) -> LineupSuggestion:
        return self.selector.select_lineup(self.game.roster, self.game.settings, self.game.periods)

    def commit_suggestion(self, suggestion: LineupSuggestion) -> Period:
        # lineups reference the game's own roster objects
        lineup = [find_player(self.game.roster, pid) for pid in suggestion.player_ids]
        size = self.game.settings.players_on_court
        if len(lineup) != size:
            raise InvalidLineup(f"Lineup has {len(lineup)} players, expected {size}")
        absent = [p.id for p in lineup if not p.is_present]
        if absent:
            raise InvalidLineup(f"Lineup includes players not present: {absent}")
        number = len(self.game.periods) + 1
        period = Period(id=f"period-{number}", number=number, lineup=lineup)
        self.game.periods.append(period)
        logger.info("committed period %d: %s", number, period.player_ids)
        return period

    def complete_period(self, period_id: str, actual_duration: Optional[float] = None) -> Period:
        period = self.get_period(period_id)
        duration = self.game.settings.period_duration if actual_duration is None else float(actual_duration)
        if not math.isfinite(duration) or duration < 0:
            raise ValueError(f"actual_duration must be a finite number >= 0, got {duration}")

        try:
            period.complete(duration)
        except PeriodAlreadyCompleted:
            logger.warning("period %s already completed; playing time not credited again", period_id)
            return period

        for pid in period.player_ids:
            find_player(self.game.roster, pid).total_playing_time += duration
        logger.info("completed period %d (%.2f min)", period.number, duration)
        return period

    def swap_player(self, period_id: str, out_id: str, in_id: str) -> Period:
        period = self.get_period(period_id)
        if period.is_completed:
            raise InvalidSwap(f"Period {period.number} is completed; its lineup is frozen")

        ids = period.player_ids
        if out_id not in ids:
            raise InvalidSwap(f"Player {out_id!r} is not in period {period.number}'s lineup")
        if in_id in ids:
            raise InvalidSwap(f"Player {in_id!r} is already in period {period.number}'s lineup")

        incoming = next((p for p in self.game.roster if p.id == in_id and p.is_present), None)
        if incoming is None:
            raise InvalidSwap(f"Player {in_id!r} is not a present roster player")

        period.lineup[ids.index(out_id)] = incoming
        logger.info("period %d: %s out, %s in", period.number, out_id, in_id)
        return period

    def can_add_overtime_period(self) -> bool:
        s = self.game.settings
        return len(self.game.periods) >= s.periods_count and self.game.overtime_used < s.overtime_periods

    def add_overtime_period(self) -> Optional[Period]:
        """Commit an overtime period, or return None when overtime isn't available yet/anymore."""
        if not self.can_add_overtime_period():
            return None
        period = self.commit_suggestion(self.generate_next_lineup())
        logger.info("overtime period %d added", period.number)
        return period

    # --------
    # Settings
    # --------
    def update_settings(self, **partial: Any) -> GameSettings:
        # completed periods keep their own actual_duration
        self.game.settings = self.game.settings.merged(partial)
        return self.game.settings

    # --------
    # Reports
    # --------
    def playing_time_report(self) -> pd.DataFrame:
        return playing_time_report(self.game.roster, self.game.periods, self.game.settings)

    def period_report(self) -> pd.DataFrame:
        return period_report(self.game.roster, self.game.periods, self.game.settings)

    def period_distribution(self) -> pd.DataFrame:
        return calculate_exposure(present_players(self.game.roster), self.game.periods)

    def summary(self) -> Dict[str, Any]:
        return game_summary(self.game)
