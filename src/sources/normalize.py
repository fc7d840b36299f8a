from __future__ import annotations

import os
import pandas as pd
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from game.models import Player
from schema import ROSTER_COLUMNS, coerce_position
from sources.schema import validate_roster_df

DEFAULT_MAPPING: Dict[str, List[str]] = {
    "player_id": ["player_id", "id"],
    "player_name": ["player_name", "name"],
    "jersey_number": ["jersey_number", "jersey", "number", "#"],
    "skill_level": ["skill_level", "skill"],
    "position": ["position", "pos"],
    "is_present": ["is_present", "present", "here"],
    "total_playing_time": ["total_playing_time", "minutes", "playing_time"],
}

_TRUTHY = {"1", "true", "yes", "y", "x", "present"}

_ATTEMPTS = [
    dict(encoding="utf-8-sig", sep=","),
    dict(encoding="utf-16",    sep="\t"),  # Excel Unicode Text
    dict(encoding="utf-8-sig", sep=";"),
    dict(encoding="latin1",    sep=","),
]


def read_flexible_csv(path: str) -> pd.DataFrame:
    abspath = os.path.abspath(path)
    if not os.path.exists(abspath):
        raise FileNotFoundError(f"CSV not found: {abspath}")
    if os.path.getsize(abspath) == 0:
        raise ValueError(f"CSV is empty: {abspath}")

    last_err = None
    for kw in _ATTEMPTS:
        try:
            df = pd.read_csv(abspath, **kw)
            if df.shape[1] <= 1:
                raise ValueError("Parsed <=1 columns; likely wrong separator/encoding")
            df.columns = [str(c).strip() for c in df.columns]
            return df
        except (UnicodeError, ValueError, pd.errors.ParserError) as e:
            last_err = e
    raise ValueError(f"Could not detect separator/encoding for {path} (last error: {last_err})")


def load_column_mapping(path: str | Path) -> Dict[str, List[str]]:
    """Column alias mapping (configs/roster_columns.yaml); missing keys fall back to defaults."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"column mapping yaml not found: {p}")
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    mapping = {k: list(v) for k, v in DEFAULT_MAPPING.items()}
    for key, aliases in data.items():
        if key not in mapping:
            raise ValueError(f"Unknown roster column '{key}' in {p}")
        mapping[key] = [str(a) for a in (aliases or [])]
    return mapping


def normalize_roster_df(df: pd.DataFrame, config_mapping: Optional[Dict[str, List[str]]] = None) -> pd.DataFrame:
    """
    Normalizes a raw roster DataFrame into the standard internal format.

    Standard Columns:
    - player_id (str)
    - player_name (str)
    - jersey_number (int)
    - skill_level (int)
    - position (Guard / Forward / Center / Any)
    - is_present (bool, default False)
    - total_playing_time (float, default 0.0)
    """
    mapping = config_mapping or DEFAULT_MAPPING
    out = pd.DataFrame()
    cols = df.columns

    # Helper to find first matching column
    def find_col(possible_names):
        for name in possible_names:
            match = next((c for c in cols if str(c).lower() == str(name).lower()), None)
            if match:
                return match
        return None

    c_name = find_col(mapping.get("player_name", []))
    if not c_name:
        raise ValueError("Missing 'player_name' column (checked variations in config)")
    out["player_name"] = df[c_name].fillna("").astype(str).str.strip()

    # ids fall back to the row number
    c_id = find_col(mapping.get("player_id", []))
    if c_id:
        out["player_id"] = df[c_id].astype(str).str.strip()
    else:
        out["player_id"] = [str(i) for i in range(1, len(df) + 1)]

    c_jersey = find_col(mapping.get("jersey_number", []))
    if not c_jersey:
        raise ValueError("Missing 'jersey_number' column")
    out["jersey_number"] = pd.to_numeric(df[c_jersey], errors="coerce")

    c_skill = find_col(mapping.get("skill_level", []))
    if c_skill:
        out["skill_level"] = pd.to_numeric(df[c_skill], errors="coerce")
    else:
        out["skill_level"] = 3

    c_pos = find_col(mapping.get("position", []))
    if c_pos:
        out["position"] = df[c_pos].map(coerce_position)
    else:
        out["position"] = coerce_position(None)

    c_present = find_col(mapping.get("is_present", []))
    if c_present:
        out["is_present"] = df[c_present].astype(str).str.strip().str.lower().isin(_TRUTHY)
    else:
        out["is_present"] = False

    c_time = find_col(mapping.get("total_playing_time", []))
    if c_time:
        out["total_playing_time"] = pd.to_numeric(df[c_time], errors="coerce").fillna(0.0).clip(lower=0.0)
    else:
        out["total_playing_time"] = 0.0

    out = out[ROSTER_COLUMNS].copy()
    validate_roster_df(out)

    out["jersey_number"] = out["jersey_number"].astype(int)
    out["skill_level"] = out["skill_level"].astype(int)
    return out.reset_index(drop=True)


def players_from_df(df: pd.DataFrame) -> List[Player]:
    return [
        Player(
            id=str(row["player_id"]),
            name=str(row["player_name"]),
            jersey_number=int(row["jersey_number"]),
            skill_level=int(row["skill_level"]),
            position=str(row["position"]),
            is_present=bool(row["is_present"]),
            total_playing_time=float(row["total_playing_time"]),
        )
        for _, row in df.iterrows()
    ]


def load_roster_csv(path: str | Path, config_mapping: Optional[Dict[str, List[str]]] = None) -> List[Player]:
    df = read_flexible_csv(str(path))
    return players_from_df(normalize_roster_df(df, config_mapping))
