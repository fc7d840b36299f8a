# src/schema.py
ROSTER_COLUMNS = [
    "player_id", "player_name", "jersey_number", "skill_level",
    "position", "is_present", "total_playing_time",
]

GUARD = "Guard"
FORWARD = "Forward"
CENTER = "Center"
ANY = "Any"  # wildcard: fits any slot, never counts as a represented position
POSITIONS = (GUARD, FORWARD, CENTER, ANY)

SKILL_MIN, SKILL_MAX = 1, 5
JERSEY_MIN, JERSEY_MAX = 1, 99

_POS_ALIASES = {
    "G": GUARD, "PG": GUARD, "SG": GUARD, "GUARD": GUARD,
    "F": FORWARD, "SF": FORWARD, "PF": FORWARD, "FORWARD": FORWARD,
    "C": CENTER, "CENTER": CENTER, "CENTRE": CENTER,
    "ANY": ANY, "UTIL": ANY, "": ANY,
}

def coerce_position(x) -> str:
    if x is None:
        return ANY
    key = str(x).strip().upper()
    if key == "NAN":
        return ANY
    if key not in _POS_ALIASES:
        raise ValueError(f"Unknown position: {x!r} (expected one of {POSITIONS})")
    return _POS_ALIASES[key]
