import pandas as pd
from typing import Dict, Iterable, List

from game.models import Period, Player


def count_periods_played(players: Iterable[Player], periods: Iterable[Period]) -> Dict[str, int]:
    """
    Completed periods per player id.
    Every given player gets an entry (0 if never on court); lineup members
    that are not in `players` are ignored.
    """
    counts = {p.id: 0 for p in players}
    for period in periods:
        if not period.is_completed:
            continue
        for pid in period.player_ids:
            if pid in counts:
                counts[pid] += 1
    return counts


def calculate_exposure(players: List[Player], periods: List[Period]) -> pd.DataFrame:
    """
    Returns DataFrame with per-player period exposure.
    cols: player_id, player_name, periods, pct (share of completed periods)
    """
    if not players:
        return pd.DataFrame(columns=["player_id", "player_name", "periods", "pct"])

    counts = count_periods_played(players, periods)
    completed = sum(1 for p in periods if p.is_completed)

    rows = []
    for player in players:
        n = counts[player.id]
        rows.append({
            "player_id": player.id,
            "player_name": player.name,
            "periods": n,
            "pct": (n / completed) * 100 if completed else 0.0,
        })

    df = pd.DataFrame(rows)
    return df.sort_values("periods", kind="mergesort").reset_index(drop=True)
