from __future__ import annotations

from sideline.contracts import ActionRequest, ActionType, GameEvent
from sideline.core import EventBus, make_id
from sideline.runtime import ScorekeeperRuntime
from tests.helpers import game_document


def test_bus_counts_by_scope_and_fans_out():
    bus = EventBus()
    seen: list[GameEvent] = []
    bus.subscribe(seen.append)

    event = bus.emit("drive", "touchdown", "g1", yards=65)
    bus.emit("playlog", "play_appended", "g1")

    assert bus.emitted_count("drive") == 1
    assert bus.emitted_count("persistence") == 0
    assert bus.emitted_count() == 2
    assert seen[0] is event
    assert event.detail == {"yards": 65}
    assert event.event_id.startswith("evt")


def test_runtime_emits_events_across_layers(tmp_path):
    runtime = ScorekeeperRuntime(root=tmp_path)
    doc = game_document("e1", plays=[], status="scheduled")

    def act(action: ActionType, payload: dict) -> None:
        assert runtime.handle_action(ActionRequest(make_id("req"), action, payload, "e1")).success

    act(ActionType.START_GAME, {"game": doc})
    act(ActionType.COMMIT_PLAY, {"play": {"type": "kickoff", "yards": 60, "primaryPlayerId": "opp_lb"}})
    act(ActionType.RESOLVE_KICKOFF_RETURN, {})

    assert runtime.event_bus.emitted_count("playlog") == 1
    assert runtime.event_bus.emitted_count("persistence") == 3
    assert runtime.event_bus.emitted_count("drive") >= 4
    with runtime.store.connect() as conn:
        total = conn.execute("SELECT COUNT(*) FROM plays WHERE game_id = 'e1'").fetchone()[0]
    assert total == 1
