import numpy as np
import pandas as pd
from typing import Any, Dict, Iterable, List

from game.errors import NoPresentPlayers
from game.models import Game, GameSettings, Period, Player
from game.roster import present_players

from .exposure import count_periods_played

REPORT_COLUMNS = ["player_id", "player_name", "player", "played", "target", "difference"]


def target_time_per_player(settings: GameSettings, present_count: int) -> float:
    """Regulation minutes each present player should get: periods * duration * on-court / present."""
    if present_count <= 0:
        raise NoPresentPlayers("Cannot compute playing-time target: no present players")
    total_player_minutes = settings.periods_count * settings.period_duration * settings.players_on_court
    return total_player_minutes / present_count


def target_periods_per_player(completed_periods: int, settings: GameSettings, present_count: int) -> float:
    if present_count <= 0:
        raise NoPresentPlayers("Cannot compute period target: no present players")
    return (completed_periods * settings.players_on_court) / present_count


def _build_report(players: List[Player], played: Dict[str, float], target: float) -> pd.DataFrame:
    rows = []
    for p in players:
        amount = played[p.id]
        rows.append({
            "player_id": p.id,
            "player_name": p.name,
            "player": p,
            "played": amount,
            "target": target,
            "difference": amount - target,
        })
    df = pd.DataFrame(rows, columns=REPORT_COLUMNS)
    # stable: equal differences keep roster order
    return df.sort_values("difference", kind="mergesort").reset_index(drop=True)


def playing_time_report(roster: Iterable[Player], periods: Iterable[Period], settings: GameSettings) -> pd.DataFrame:
    """
    Minutes played vs. regulation target, present players only.
    Sorted ascending by difference (most under target first).
    `periods` is accepted for signature parity with period_report; minutes
    come from each player's accrued total.
    """
    present = present_players(roster)
    target = target_time_per_player(settings, len(present))
    played = {p.id: float(p.total_playing_time) for p in present}
    return _build_report(present, played, target)


def period_report(roster: Iterable[Player], periods: Iterable[Period], settings: GameSettings) -> pd.DataFrame:
    """
    Completed periods played vs. an even share of the completed periods so far.
    Preferred fairness signal: unaffected by partial-period durations.
    """
    present = present_players(roster)
    periods = list(periods)
    completed = sum(1 for p in periods if p.is_completed)
    target = target_periods_per_player(completed, settings, len(present))
    counts = count_periods_played(present, periods)
    played = {pid: float(n) for pid, n in counts.items()}
    return _build_report(present, played, target)


def balance_score(playing_times: Iterable[float]) -> float:
    """
    1 - coefficient of variation, clipped at 0.
    Nobody having played yet (mean 0) counts as perfectly balanced.
    """
    arr = np.asarray(list(playing_times), dtype=float)
    if arr.size == 0:
        raise NoPresentPlayers("Cannot compute balance score: no playing times")
    mean = arr.mean()
    if mean <= 0:
        return 1.0
    return float(max(0.0, 1.0 - arr.std() / mean))


def game_summary(game: Game) -> Dict[str, Any]:
    present = present_players(game.roster)
    if not present:
        raise NoPresentPlayers("Cannot summarize a game with no present players")
    times = [p.total_playing_time for p in present]
    return {
        "present_players": len(present),
        "completed_periods": len(game.completed_periods),
        "regulation_periods": game.settings.periods_count,
        "average_playing_time": float(np.mean(times)),
        "time_balance": balance_score(times),
    }
