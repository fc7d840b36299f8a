import pytest
import sys
import os

sys.path.append(os.path.join(os.getcwd(), "src"))

from analysis.exposure import count_periods_played
from game.errors import InsufficientPlayers, InvalidLineup, InvalidSwap, UnknownPeriod, UnknownPlayer
from game.manager import GameManager
from game.models import Game, GameSettings, LineupSuggestion, Period, Player
from game.rules import Heuristics
from lineups.weighted import WeightedCandidateSelector

POSITIONS = ["Guard", "Forward", "Center", "Guard", "Forward", "Any", "Center", "Guard"]


def _game(n=8, present=None, settings=None):
    roster = [
        Player(id=f"P{i}", name=f"Player {i}", jersey_number=i, skill_level=(i % 5) + 1,
               position=POSITIONS[(i - 1) % len(POSITIONS)], is_present=True)
        for i in range(1, n + 1)
    ]
    if present is not None:
        for p in roster:
            p.is_present = p.id in present
    return Game(id="game-1", team_id="team-1", settings=settings or GameSettings(), roster=roster)


def _minutes(game):
    return {p.id: p.total_playing_time for p in game.roster}


def _period_with(game, ids):
    """Commit a period with an explicit lineup, bypassing the selector."""
    players = tuple(p for pid in ids for p in game.roster if p.id == pid)
    suggestion = LineupSuggestion(players=players, average_skill_level=3.0,
                                  playing_time_balance=1.0, position_balance=1.0)
    return GameManager(game).commit_suggestion(suggestion)


def test_commit_allocates_sequence_numbers():
    game = _game()
    manager = GameManager(game)

    first = manager.commit_suggestion(manager.start_game())
    manager.complete_period(first.id)
    second = manager.commit_suggestion(manager.generate_next_lineup())

    assert game.is_active
    assert [p.number for p in game.periods] == [1, 2]
    assert first.id == "period-1" and second.id == "period-2"
    assert not second.is_completed
    assert len(second.lineup) == game.settings.players_on_court
    # lineup holds the roster's own player objects
    assert all(any(p is r for r in game.roster) for p in second.lineup)


def test_complete_period_credits_once():
    game = _game(settings=GameSettings(period_duration=4))
    manager = GameManager(game)
    period = manager.commit_suggestion(manager.start_game())

    manager.complete_period(period.id)
    manager.complete_period(period.id)

    for p in game.roster:
        expected = 4.0 if p.id in period.player_ids else 0.0
        assert p.total_playing_time == expected
    assert period.is_completed
    assert period.actual_duration == 4


def test_complete_period_with_actual_duration():
    game = _game()
    manager = GameManager(game)
    period = manager.commit_suggestion(manager.start_game())

    manager.complete_period(period.id, actual_duration=2.5)

    assert period.actual_duration == 2.5
    assert all(p.total_playing_time == 2.5 for p in period.lineup)
    with pytest.raises(UnknownPeriod):
        manager.complete_period("period-99")


def test_swap_player_rules():
    game = _game(n=6)
    period = _period_with(game, ["P1", "P2", "P3", "P4", "P5"])
    manager = GameManager(game)

    manager.swap_player(period.id, "P2", "P6")
    assert period.player_ids == ["P1", "P6", "P3", "P4", "P5"]

    with pytest.raises(InvalidSwap):
        manager.swap_player(period.id, "P6", "P1")  # already on court
    with pytest.raises(InvalidSwap):
        manager.swap_player(period.id, "P2", "P1")  # P2 no longer on court

    game.roster[1].is_present = False
    with pytest.raises(InvalidSwap):
        manager.swap_player(period.id, "P6", "P2")  # P2 not present

    manager.complete_period(period.id)
    game.roster[1].is_present = True
    with pytest.raises(InvalidSwap):
        manager.swap_player(period.id, "P6", "P2")  # completed periods are frozen
    assert period.player_ids == ["P1", "P6", "P3", "P4", "P5"]


def test_start_game_needs_enough_present_players():
    game = _game(present={"P1", "P2", "P3", "P4"})
    manager = GameManager(game)

    with pytest.raises(InsufficientPlayers):
        manager.start_game()
    assert not game.is_active

    manager.mark_present("P5", True)
    assert len(manager.start_game().players) == 5


def test_commit_rejects_bad_lineups():
    game = _game(present={"P1", "P2", "P3", "P4", "P5", "P6"})
    with pytest.raises(InvalidLineup):
        _period_with(game, ["P1", "P2", "P3", "P4"])
    with pytest.raises(InvalidLineup):
        _period_with(game, ["P1", "P2", "P3", "P4", "P7"])  # P7 absent
    with pytest.raises(InvalidLineup):
        Period(id="x", number=1, lineup=[game.roster[0], game.roster[0]])
    assert game.periods == []


def test_mark_present_unknown_player():
    manager = GameManager(_game())
    with pytest.raises(UnknownPlayer):
        manager.mark_present("nobody", True)


def test_late_player_gets_partial_credit():
    game = _game(n=9, present={f"P{i}" for i in range(1, 9)})
    manager = GameManager(game, heuristics=Heuristics(late_arrival_credit=0.7))
    for _ in range(2):
        period = manager.commit_suggestion(manager.generate_next_lineup())
        manager.complete_period(period.id)

    late = manager.add_late_player("P9")

    # 4 min * 5 on court / 9 present per period, 2 periods, 70%
    assert late.is_present
    assert late.total_playing_time == pytest.approx(4 * 5 / 9 * 2 * 0.7)


def test_late_player_before_any_period_gets_nothing():
    game = _game(n=6, present={"P1", "P2", "P3", "P4", "P5"})
    late = GameManager(game).add_late_player("P6")
    assert late.is_present
    assert late.total_playing_time == 0.0


def test_complete_period_rejects_non_finite_duration():
    game = _game()
    manager = GameManager(game)
    period = manager.commit_suggestion(manager.start_game())

    for bad in (float("nan"), float("inf"), -1.0):
        with pytest.raises(ValueError):
            manager.complete_period(period.id, actual_duration=bad)

    assert not period.is_completed
    assert period.actual_duration is None
    assert all(t == 0.0 for t in _minutes(game).values())

    with pytest.raises(ValueError):
        manager.update_settings(period_duration=float("nan"))
    assert game.settings.period_duration == 4.0


def test_late_player_keeps_higher_existing_time():
    game = _game(n=9, present={f"P{i}" for i in range(1, 9)})
    game.roster[8].total_playing_time = 10.0  # returning from an earlier stint
    manager = GameManager(game)
    period = manager.commit_suggestion(manager.generate_next_lineup())
    manager.complete_period(period.id)

    late = manager.add_late_player("P9")

    # credit would be 4 * 5 / 9 * 0.7 ~ 1.56
    assert late.total_playing_time == 10.0


def test_overtime_only_after_regulation():
    game = _game(settings=GameSettings(periods_count=2, overtime_periods=1))
    manager = GameManager(game)

    assert manager.add_overtime_period() is None
    for _ in range(2):
        manager.complete_period(manager.commit_suggestion(manager.generate_next_lineup()).id)

    assert manager.can_add_overtime_period()
    ot = manager.add_overtime_period()
    assert ot is not None and ot.number == 3
    manager.complete_period(ot.id)
    assert manager.add_overtime_period() is None
    assert len(game.periods) == 3


def test_update_settings_keeps_history():
    game = _game(settings=GameSettings(period_duration=4))
    manager = GameManager(game)
    period = manager.commit_suggestion(manager.start_game())
    manager.complete_period(period.id)
    before = _minutes(game)

    settings = manager.update_settings(period_duration=6, players_on_court=4)

    assert settings.period_duration == 6 and game.settings is settings
    assert period.actual_duration == 4
    assert _minutes(game) == before
    nxt = manager.commit_suggestion(manager.generate_next_lineup())
    assert len(nxt.lineup) == 4
    manager.complete_period(nxt.id)
    assert nxt.actual_duration == 6

    with pytest.raises(ValueError):
        manager.update_settings(quarters=4)


def test_full_game_minutes_match_periods():
    game = _game(n=8)
    manager = GameManager(game, selector=WeightedCandidateSelector(seed=11))
    manager.start_game()
    for _ in range(game.settings.periods_count):
        period = manager.commit_suggestion(manager.generate_next_lineup())
        manager.complete_period(period.id)

    counts = count_periods_played(game.roster, game.periods)
    assert sum(counts.values()) == game.settings.periods_count * game.settings.players_on_court
    for p in game.roster:
        assert p.total_playing_time == pytest.approx(counts[p.id] * game.settings.period_duration)

    report = manager.playing_time_report()
    assert report["difference"].is_monotonic_increasing
    assert report["target"].iloc[0] == pytest.approx(8 * 4 * 5 / 8)
    assert len(manager.period_report()) == 8
    assert manager.period_distribution()["periods"].sum() == 40

    progress = manager.game_progress()
    assert progress == {"completed_periods": 8, "total_periods": 10, "time_remaining": 8.0}
    assert 0.0 <= manager.summary()["time_balance"] <= 1.0
    assert not manager.end_game().is_active


if __name__ == "__main__":
    test_complete_period_credits_once()
    test_swap_player_rules()
