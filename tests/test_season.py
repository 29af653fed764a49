from __future__ import annotations

from datetime import datetime, UTC

import pytest

from sideline.season import (
    analyze_legacy_games,
    build_schedule,
    build_season_export,
    format_migration_report,
    game_details,
    migrate_games,
    player_game_lines,
    season_leaders,
    season_player_totals,
    season_record,
    season_team_totals,
)
from tests.helpers import AWAY, HOME, dated, game_document, home_roster, make_game, make_play, make_season, sample_plays


def _games():
    win = make_game("g1", sample_plays(), date=dated(12), opponent_name="Central")
    loss = make_game(
        "g2",
        [
            make_play("rush", 20, HOME, ("rb1", "rusher")),
            make_play("pass_complete", 30, HOME, ("qb1", "passer"), ("wr1", "receiver")),
            make_play("rush_td", 5, AWAY, ("opp_rb", "rusher")),
            make_play("extra_point_made", 0, AWAY),
        ],
        date=dated(5),
        opponent_name="North",
    )
    unplayed = make_game("g3", opponent_name="East")
    tie = make_game(
        "g4",
        [make_play("field_goal_made", 25, HOME, ("k1", "kicker")), make_play("field_goal_made", 30, AWAY)],
        date=dated(19),
        opponent_name="West",
    )
    return [win, loss, unplayed, tie]


def test_schedule_sorted_by_date_with_undated_last():
    schedule = build_schedule(_games())
    assert [g.game_id for g in schedule] == ["g2", "g1", "g4", "g3"]
    assert [g.result for g in schedule] == ["L", "W", "T", ""]
    assert (schedule[1].home_score, schedule[1].opp_score) == (10, 6)
    assert schedule[3].played is False


def test_record_display():
    record = season_record(build_schedule(_games()))
    assert (record.wins, record.losses, record.ties) == (1, 1, 1)
    assert record.display == "1-1-1"
    assert season_record(build_schedule(_games()[:2])).display == "1-1"


def test_player_totals_sum_games_and_take_max_longs():
    totals = {t.player_id: t for t in season_player_totals(_games(), home_roster())}
    rb = totals["rb1"]
    assert rb.games_played == 2
    assert rb.value("rushing_attempts") == 3
    assert rb.value("rushing_yards") == 67
    assert rb.value("rushing_long") == 35
    assert rb.value("rushing_yards_per_game") == pytest.approx(33.5)

    k = totals["k1"]
    assert k.value("field_goals_made") == 2
    assert k.value("field_goal_long") == 31
    assert k.value("total_points") == 7

    assert totals["lb1"].games_played == 1
    assert totals["db1"].games_played == 0
    assert totals["qb1"].value("passer_rating") > 0


def test_empty_season_roster_falls_back_to_game_rosters():
    totals = season_player_totals(_games(), [])
    assert [t.player_id for t in totals] == [p.player_id for p in home_roster()]


def test_team_totals():
    team = season_team_totals(_games())
    assert team.games_played == 3
    assert (team.wins, team.losses, team.ties) == (1, 1, 1)
    assert (team.points_for, team.points_against) == (13, 16)
    assert team.point_differential == -3
    assert team.rushing_yards == 67
    assert team.passing_yards == 48
    assert team.yards_per_game == pytest.approx(115 / 3)


def test_leaders_pick_maximum_and_break_ties_by_roster_order():
    totals = season_player_totals(_games(), home_roster())
    leaders = season_leaders(totals)
    assert set(leaders) == {"offense", "defense", "special_teams", "scoring"}

    scoring = {l.category: l for l in leaders["scoring"]}
    assert scoring["total_points"].player_id == "k1"
    assert scoring["total_points"].display_value == "7"

    tackles = next(l for l in leaders["defense"] if l.category == "tackles")
    assert tackles.player_id == "lb1"
    assert tackles.display_value == "0.5"

    reordered = [p for p in home_roster() if p.player_id != "lb1"] + [p for p in home_roster() if p.player_id == "lb1"]
    tackles = next(l for l in season_leaders(season_player_totals(_games(), reordered))["defense"] if l.category == "tackles")
    assert tackles.player_id == "lb2"

    completion = next(l for l in leaders["offense"] if l.category == "completion_percentage")
    assert completion.display_value == "100%"
    assert all(l.category != "interceptions_def" for l in leaders["defense"])


def test_player_game_lines_follow_schedule_order():
    lines = player_game_lines(_games(), home_roster())
    assert [(l.game_id, l.result) for l in lines["rb1"]] == [("g2", "L"), ("g1", "W")]
    assert lines["rb1"][1].stats["rushing_touchdowns"] == 1
    assert lines["db1"] == []


def test_game_details_tables_are_filtered_and_sorted():
    details = {d.game_id: d for d in game_details(_games(), home_roster())}
    assert set(details) == {"g1", "g2", "g4"}
    g1 = details["g1"]
    assert [r["player_id"] for r in g1.rushing] == ["rb1"]
    assert [r["player_id"] for r in g1.scoring] == ["rb1", "k1"]
    assert [r["player_id"] for r in g1.defense] == ["lb1", "lb2"]
    assert g1.team_stats["rushing_yards"] == 47
    assert details["g4"].kicking[0]["fg_long"] == 25


def test_season_export_contract():
    generated = datetime(2025, 12, 1, tzinfo=UTC)
    export = build_season_export(make_season(_games()), team_name="Wildcats", generated_at=generated)
    data = export.to_dict()

    assert data["team_name"] == "Wildcats"
    assert data["record"] == {"wins": 1, "losses": 1, "ties": 1, "display": "1-1-1"}
    assert data["season"]["year"] == 2025
    assert [p["player_id"] for p in data["player_stats"]] == ["k1", "rb1", "qb1", "wr1", "lb1", "lb2"]
    assert data["schedule"][0]["site"] == "home"
    assert data["schedule"][0]["date"].startswith("2025-09-05")
    assert data["generated_at"] == generated.isoformat()
    assert data["team_stats"]["point_differential"] == -3
    assert len(data["roster"]) == len(home_roster())
    assert set(data["leaders"]) == {"offense", "defense", "special_teams", "scoring"}


def _legacy_documents():
    modern = game_document("m1")
    legacy = {
        "id": "l1",
        "homePlayers": [{"id": "rb1", "name": "Rory Bell"}],
        "homeScore": 99,
        "oppScore": 0,
        "plays": [
            {"id": "b1", "type": "rush", "yards": 5, "primaryPlayerId": "rb1"},
            {"id": "b2", "type": "Flea flicker", "teamSide": "home"},
            {"id": "b2", "type": "rush", "teamSide": "home"},
        ],
    }
    broken = game_document("x1")
    broken["plays"] = [*broken["plays"], {"id": "bad", "type": "rush", "yards": "far", "teamSide": "home"}]
    return [modern, legacy, broken]


def test_migration_report_counts():
    report = analyze_legacy_games(_legacy_documents())
    assert report.total_games == 3
    assert report.legacy_games == 2
    assert report.migrated_games == 1
    assert report.failed_migrations == 1
    assert report.roster_migrations == 1
    assert report.opponent_name_fills == 1
    assert report.team_side_defaults == 1
    assert report.unrecognized_types == 1
    assert report.duplicate_plays == 1
    assert report.score_mismatches == 1
    assert report.errors[0][0] == "x1"

    text = format_migration_report(report)
    assert "Games with legacy structure: 2" in text
    assert "Migration success rate: 50.0%" in text


def test_migrate_games_returns_recomputed_games():
    games, _ = migrate_games(_legacy_documents())
    assert [g.game_id for g in games] == ["m1", "l1"]
    assert games[1].opponent_name == "TBD Opponent"
    assert games[0].home_score == 7


def test_schedule_accepts_naive_dates_next_to_undated_games():
    games = [
        make_game("late", date=datetime(2025, 9, 12, 19, 0)),
        make_game("undated"),
        make_game("early", date=dated(5)),
    ]
    assert [g.game_id for g in build_schedule(games)] == ["early", "late", "undated"]
    assert season_record(build_schedule(games)).display == "0-0"
