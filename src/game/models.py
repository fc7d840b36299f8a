# src/game/models.py
from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from schema import ANY, POSITIONS

from .errors import InvalidLineup, PeriodAlreadyCompleted

# ----------------------------
# Roster
# ----------------------------

@dataclass
class Player:
    id: str
    name: str
    jersey_number: int
    skill_level: int  # 1-5
    position: str = ANY
    is_present: bool = False
    total_playing_time: float = 0.0  # minutes

    def __post_init__(self) -> None:
        if self.position not in POSITIONS:
            raise ValueError(f"Player {self.id}: unknown position {self.position!r}")


# ----------------------------
# Settings
# ----------------------------

@dataclass(frozen=True)
class GameSettings:
    periods_count: int = 8
    period_duration: float = 4.0
    overtime_periods: int = 2
    players_on_court: int = 5

    def __post_init__(self) -> None:
        if self.periods_count <= 0:
            raise ValueError(f"periods_count must be positive: {self.periods_count}")
        if not math.isfinite(self.period_duration) or self.period_duration <= 0:
            raise ValueError(f"period_duration must be a positive number: {self.period_duration}")
        if self.overtime_periods < 0:
            raise ValueError(f"overtime_periods must be >= 0: {self.overtime_periods}")
        if self.players_on_court <= 0:
            raise ValueError(f"players_on_court must be positive: {self.players_on_court}")

    def merged(self, partial: Dict[str, Any]) -> "GameSettings":
        """Return a copy with `partial` applied. Unknown keys are rejected."""
        known = {f.name for f in fields(self)}
        unknown = set(partial) - known
        if unknown:
            raise ValueError(f"Unknown game settings: {sorted(unknown)}")
        return replace(self, **partial)

    @property
    def total_periods(self) -> int:
        return self.periods_count + self.overtime_periods


# ----------------------------
# Periods / game
# ----------------------------

@dataclass
class Period:
    id: str
    number: int
    lineup: List[Player]
    is_completed: bool = False
    actual_duration: Optional[float] = None

    def __post_init__(self) -> None:
        ids = [p.id for p in self.lineup]
        if len(ids) != len(set(ids)):
            raise InvalidLineup(f"Period {self.number}: lineup lists a player more than once")

    @property
    def player_ids(self) -> List[str]:
        return [p.id for p in self.lineup]

    def complete(self, duration: float) -> None:
        if self.is_completed:
            raise PeriodAlreadyCompleted(f"Period {self.number} is already completed")
        self.is_completed = True
        self.actual_duration = duration


@dataclass
class Game:
    id: str
    team_id: str
    settings: GameSettings = field(default_factory=GameSettings)
    roster: List[Player] = field(default_factory=list)
    periods: List[Period] = field(default_factory=list)
    date: datetime = field(default_factory=datetime.now)
    is_active: bool = False

    @property
    def completed_periods(self) -> List[Period]:
        return [p for p in self.periods if p.is_completed]

    @property
    def overtime_used(self) -> int:
        return max(0, len(self.periods) - self.settings.periods_count)


@dataclass(frozen=True)
class LineupSuggestion:
    """Advisory lineup. Never persisted; thrown away once committed or replaced."""
    players: Tuple[Player, ...]
    average_skill_level: float
    playing_time_balance: float  # 0..1, 1 = perfectly balanced
    position_balance: float      # 0..1

    @property
    def player_ids(self) -> List[str]:
        return [p.id for p in self.players]
