import pytest
import sys
import os

sys.path.append(os.path.join(os.getcwd(), "src"))

from analysis.exposure import calculate_exposure, count_periods_played
from analysis.fairness import (
    balance_score,
    game_summary,
    period_report,
    playing_time_report,
    target_time_per_player,
)
from game.errors import NoPresentPlayers
from game.models import Game, GameSettings, Period, Player


def _player(pid, minutes=0.0, present=True, skill=3, position="Any"):
    return Player(id=pid, name=f"Player {pid}", jersey_number=int(pid[1:]), skill_level=skill,
                  position=position, is_present=present, total_playing_time=minutes)


def test_playing_time_report_order():
    # target = 3 periods * 3 min * 2 on court / 3 present = 6
    settings = GameSettings(periods_count=3, period_duration=3, players_on_court=2)
    roster = [_player("P1", 4), _player("P2", 8), _player("P3", 2)]

    report = playing_time_report(roster, [], settings)

    assert report["player_id"].tolist() == ["P3", "P1", "P2"]
    assert report["difference"].tolist() == [-4.0, -2.0, 2.0]
    assert (report["target"] == 6.0).all()
    assert report.loc[0, "player"] is roster[2]


def test_report_ignores_absent_players():
    settings = GameSettings(periods_count=3, period_duration=3, players_on_court=2)
    roster = [_player("P1", 4), _player("P2", 8), _player("P3", 2), _player("P4", 0, present=False)]

    report = playing_time_report(roster, [], settings)

    assert "P4" not in report["player_id"].tolist()
    assert report["target"].iloc[0] == pytest.approx(6.0)


def test_period_report_targets_completed_periods_only():
    settings = GameSettings(players_on_court=2)
    roster = [_player("P1"), _player("P2"), _player("P3"), _player("P4")]
    periods = [
        Period(id="period-1", number=1, lineup=[roster[0], roster[1]], is_completed=True, actual_duration=4),
        Period(id="period-2", number=2, lineup=[roster[2], roster[0]], is_completed=True, actual_duration=4),
        Period(id="period-3", number=3, lineup=[roster[3], roster[1]]),  # in progress
    ]

    report = period_report(roster, periods, settings)

    # 2 completed * 2 on court / 4 present
    assert (report["target"] == 1.0).all()
    assert report["player_id"].tolist() == ["P4", "P2", "P3", "P1"]
    assert report["played"].tolist() == [0, 1, 1, 2]


def test_no_present_players_is_explicit():
    settings = GameSettings()
    roster = [_player("P1", present=False)]

    with pytest.raises(NoPresentPlayers):
        target_time_per_player(settings, 0)
    with pytest.raises(NoPresentPlayers):
        playing_time_report(roster, [], settings)
    with pytest.raises(NoPresentPlayers):
        period_report(roster, [], settings)


def test_rotation_counts_sum_to_player_periods():
    settings = GameSettings(players_on_court=3)
    roster = [_player(f"P{i}") for i in range(1, 6)]
    lineups = [roster[0:3], roster[1:4], roster[2:5], [roster[0], roster[2], roster[4]]]
    periods = [
        Period(id=f"period-{i}", number=i, lineup=lu, is_completed=True, actual_duration=4)
        for i, lu in enumerate(lineups, 1)
    ]

    counts = count_periods_played(roster, periods)

    assert sum(counts.values()) == len(periods) * settings.players_on_court


def test_balance_score():
    assert balance_score([4, 4, 4, 4]) == pytest.approx(1.0)
    assert balance_score([0, 0, 0]) == 1.0
    # mean 4, population std 2 -> 0.5
    assert balance_score([2, 6]) == pytest.approx(0.5)
    assert balance_score([0, 0, 0, 100]) == 0.0
    with pytest.raises(NoPresentPlayers):
        balance_score([])


def test_exposure_table_and_summary():
    roster = [_player("P1", 8), _player("P2", 4), _player("P3", 4)]
    periods = [
        Period(id="period-1", number=1, lineup=[roster[0], roster[1]], is_completed=True, actual_duration=4),
        Period(id="period-2", number=2, lineup=[roster[0], roster[2]], is_completed=True, actual_duration=4),
    ]
    exposure = calculate_exposure(roster, periods)
    assert exposure["player_id"].tolist() == ["P2", "P3", "P1"]
    assert exposure["pct"].tolist() == [50.0, 50.0, 100.0]

    game = Game(id="g", team_id="t", settings=GameSettings(players_on_court=2), roster=roster, periods=periods)
    summary = game_summary(game)
    assert summary["completed_periods"] == 2
    assert summary["average_playing_time"] == pytest.approx(16 / 3)
    assert 0.0 <= summary["time_balance"] <= 1.0


if __name__ == "__main__":
    test_playing_time_report_order()
    test_period_report_targets_completed_periods_only()
    print("PASS: fairness")
