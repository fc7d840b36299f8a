from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from game.errors import InsufficientPlayers
from game.models import GameSettings, LineupSuggestion, Period, Player
from game.roster import present_players
from game.rules import Heuristics
from schema import ANY


class LineupSelector(ABC):
    """Picks the next period's lineup. Must not mutate players or periods."""

    name: str = ""

    @classmethod
    def configured(cls, heuristics: Heuristics, seed: Optional[int] = None) -> "LineupSelector":
        """Build from rule-set heuristics. Selectors without tunables ignore both."""
        return cls()

    @abstractmethod
    def select_lineup(
        self,
        players: Sequence[Player],
        settings: GameSettings,
        periods: Sequence[Period],
    ) -> LineupSuggestion:
        pass


def eligible_players(players: Sequence[Player], settings: GameSettings) -> List[Player]:
    present = present_players(players)
    if len(present) < settings.players_on_court:
        raise InsufficientPlayers(len(present), settings.players_on_court)
    return present


def average_skill(lineup: Sequence[Player]) -> float:
    if not lineup:
        return 0.0
    return sum(p.skill_level for p in lineup) / len(lineup)


def position_balance(lineup: Sequence[Player]) -> float:
    """Distinct non-Any positions over the most a lineup this size could hold (Guard/Forward/Center)."""
    if not lineup:
        return 0.0
    distinct = {p.position for p in lineup if p.position != ANY}
    return len(distinct) / min(3, len(lineup))
