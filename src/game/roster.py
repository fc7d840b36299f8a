# src/game/roster.py
from __future__ import annotations

from typing import Dict, Iterable, List

from schema import JERSEY_MAX, JERSEY_MIN, SKILL_MAX, SKILL_MIN

from .errors import DuplicateJerseyNumber, UnknownPlayer
from .models import Player


def present_players(players: Iterable[Player]) -> List[Player]:
    return [p for p in players if p.is_present]


def find_player(players: Iterable[Player], player_id: str) -> Player:
    for p in players:
        if p.id == player_id:
            return p
    raise UnknownPlayer(f"No player with id {player_id!r} on this roster")


def validate_roster(players: List[Player]) -> None:
    """
    Roster edit boundary checks:
      - jersey number 1-99 and unique within the roster
      - skill level 1-5
      - player ids unique
    """
    seen_jerseys: Dict[int, str] = {}
    seen_ids = set()
    for p in players:
        if not str(p.name).strip():
            raise ValueError(f"Player {p.id}: name is required")
        if not (JERSEY_MIN <= p.jersey_number <= JERSEY_MAX):
            raise ValueError(f"Player {p.id}: jersey number must be {JERSEY_MIN}-{JERSEY_MAX}, got {p.jersey_number}")
        if not (SKILL_MIN <= p.skill_level <= SKILL_MAX):
            raise ValueError(f"Player {p.id}: skill level must be {SKILL_MIN}-{SKILL_MAX}, got {p.skill_level}")
        if p.id in seen_ids:
            raise ValueError(f"Duplicate player id: {p.id}")
        if p.jersey_number in seen_jerseys:
            raise DuplicateJerseyNumber(p.jersey_number)
        seen_ids.add(p.id)
        seen_jerseys[p.jersey_number] = p.id
