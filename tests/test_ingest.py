from __future__ import annotations

import pytest

from sideline.contracts import UNATTRIBUTED_PLAYER_ID, ParticipantRole, PlayType, TeamSide, ValidationError
from sideline.football import (
    classify_play_type,
    game_to_document,
    normalize_game_document,
    normalize_play,
    recompute,
    tackle_credits,
)
from sideline.football.ingest import normalize_roster
from tests.helpers import game_document


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("rush", PlayType.RUSH),
        ("Rushing Touchdown", PlayType.RUSH_TD),
        ("Pass Completion", PlayType.PASS_COMPLETE),
        ("Touchdown pass", PlayType.PASS_TD),
        ("Field Goal - Good", PlayType.FIELD_GOAL_MADE),
        ("Field goal missed", PlayType.FIELD_GOAL_MISSED),
        ("PAT made", PlayType.EXTRA_POINT_MADE),
        ("2pt failed", PlayType.TWO_POINT_FAILED),
        ("Kick Return", PlayType.KICKOFF_RETURN),
        ("TFL", PlayType.TACKLE_FOR_LOSS),
        ("QB sacked", PlayType.SACK),
        ("interpretive dance", None),
    ],
)
def test_legacy_type_keywords(raw, expected):
    assert classify_play_type(raw) is expected


def test_unrecognized_type_becomes_other_with_raw_text_kept():
    play, issues = normalize_play({"id": "x", "type": "Flea flicker mystery", "yards": 30, "teamSide": "home"})
    assert play is not None
    assert play.play_type is PlayType.OTHER
    assert play.raw_type == "Flea flicker mystery"
    assert [i.code for i in issues] == ["UNRECOGNIZED_PLAY_TYPE"]
    assert issues[0].severity == "warning"


def test_missing_team_side_defaults_home_with_diagnostic():
    play, issues = normalize_play({"id": "x", "type": "rush", "yards": 3})
    assert play.team_side is TeamSide.HOME
    assert "MISSING_TEAM_SIDE" in [i.code for i in issues]


def test_primary_and_assisting_players_become_participants():
    play, _ = normalize_play(
        {"id": "x", "type": "pass_complete", "yards": 9, "teamSide": "home", "primaryPlayerId": "qb1", "assistingPlayerIds": ["wr1"]}
    )
    assert [(p.player_id, p.role) for p in play.participants] == [
        ("qb1", ParticipantRole.PASSER),
        ("wr1", ParticipantRole.RECEIVER),
    ]

    tackle, _ = normalize_play(
        {"id": "y", "type": "tackle", "teamSide": "away", "primaryPlayerId": "lb1", "assistingPlayerIds": ["lb2"]}
    )
    assert [p.role for p in tackle.participants] == [ParticipantRole.TACKLER, ParticipantRole.ASSIST]


def test_legacy_roster_shape_and_opponent_default():
    doc = game_document()
    roster = doc.pop("myTeamSnapshot")["roster"]
    doc.pop("opponentSnapshot")
    doc.pop("opponentName")
    doc["homePlayers"] = roster

    normalized = normalize_game_document(doc)
    assert [p.player_id for p in normalized.game.home_roster][:2] == ["qb1", "rb1"]
    assert normalized.game.opponent_name == "TBD Opponent"
    assert "LEGACY_ROSTER_SHAPE" in [i.code for i in normalized.diagnostics]


def test_duplicate_play_ids_are_dropped():
    doc = game_document()
    doc["plays"].append(dict(doc["plays"][1]))
    normalized = normalize_game_document(doc)

    assert normalized.duplicate_play_ids == ["a2"]
    assert [p.play_id for p in normalized.game.plays] == ["a1", "a2", "a3"]
    assert recompute(normalized.game).home_score == 7


def test_malformed_plays_skipped_or_rejected():
    doc = game_document()
    doc["plays"].append({"id": "bad", "type": "rush", "yards": "lots", "teamSide": "home"})
    doc["plays"].append("not a play")

    normalized = normalize_game_document(doc)
    assert len(normalized.game.plays) == 3
    assert {i.code for i in normalized.errors} == {"MALFORMED_PLAY"}

    with pytest.raises(ValidationError) as excinfo:
        normalize_game_document(doc, strict=True)
    assert len(excinfo.value.issues) == 2


def test_canonical_document_round_trips_through_normalization():
    game = recompute(normalize_game_document(game_document()).game)
    again = recompute(normalize_game_document(game_to_document(game)).game)

    assert again.plays == game.plays
    assert again.home_roster == game.home_roster
    assert (again.home_score, again.opp_score) == (7, 0)
    assert again.date == game.date


def test_legacy_team_placeholder_is_unattributed():
    play, _ = normalize_play(
        {
            "id": "t",
            "type": "tackle",
            "teamSide": "away",
            "primaryPlayerId": "team-placeholder-player",
            "assistingPlayerIds": ["lb2"],
        }
    )
    assert play.participants[0].player_id == UNATTRIBUTED_PLAYER_ID
    assert play.player_ids() == ["lb2"]
    assert tackle_credits(play) == {"lb2": 1.0}

    roster = normalize_roster([{"id": "team-placeholder-player", "name": "Team"}, {"id": "qb1", "name": "Quinn Banks"}])
    assert [p.player_id for p in roster] == ["qb1"]


def test_non_numeric_credit_is_a_malformed_play():
    play, issues = normalize_play(
        {"id": "c", "type": "tackle", "teamSide": "away", "participants": [{"playerId": "lb1", "role": "tackler", "credit": "half"}]}
    )
    assert play is None
    assert [(i.code, i.field_path) for i in issues] == [("MALFORMED_PLAY", "plays[0].participants[0].credit")]

    doc = game_document()
    doc["plays"].append({"id": "c", "type": "tackle", "teamSide": "away", "participants": [{"playerId": "lb1", "credit": "half"}]})
    assert len(normalize_game_document(doc).game.plays) == 3
    with pytest.raises(ValidationError):
        normalize_game_document(doc, strict=True)
