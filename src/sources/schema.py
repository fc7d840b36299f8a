import pandas as pd

from game.errors import DuplicateJerseyNumber
from schema import JERSEY_MAX, JERSEY_MIN, ROSTER_COLUMNS, SKILL_MAX, SKILL_MIN


def validate_roster_df(df: pd.DataFrame) -> None:
    """
    Validates that the roster DataFrame has the required columns and sane values.
    Raises ValueError (DuplicateJerseyNumber for repeated jerseys) if invalid.
    """
    missing = [c for c in ROSTER_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Normalized roster is missing columns: {missing}")

    if df.empty:
        raise ValueError("Roster is empty after normalization.")

    nameless = df[df["player_name"].astype(str).str.strip() == ""]
    if not nameless.empty:
        raise ValueError(f"Player name is required (rows {nameless.index.tolist()})")

    jersey = df["jersey_number"]
    bad_jersey = df[jersey.isna() | (jersey < JERSEY_MIN) | (jersey > JERSEY_MAX) | (jersey % 1 != 0)]
    if not bad_jersey.empty:
        raise ValueError(
            f"Jersey numbers must be whole numbers {JERSEY_MIN}-{JERSEY_MAX}: "
            f"{bad_jersey['player_name'].tolist()}"
        )

    dupes = jersey[jersey.duplicated()]
    if not dupes.empty:
        raise DuplicateJerseyNumber(int(dupes.iloc[0]))

    skill = df["skill_level"]
    bad_skill = df[skill.isna() | (skill < SKILL_MIN) | (skill > SKILL_MAX) | (skill % 1 != 0)]
    if not bad_skill.empty:
        raise ValueError(
            f"Skill levels must be whole numbers {SKILL_MIN}-{SKILL_MAX}: "
            f"{bad_skill['player_name'].tolist()}"
        )

    if df["player_id"].duplicated().any():
        raise ValueError(f"Duplicate player ids: {df.loc[df['player_id'].duplicated(), 'player_id'].tolist()}")
