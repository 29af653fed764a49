from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import json

from sideline.contracts import ActionRequest, Game
from sideline.core import make_id
from sideline.football.drive import pending_name
from sideline.runtime.scorekeeper import ScorekeeperRuntime


@dataclass(slots=True)
class ReplayAction:
    action_type: str
    payload: dict
    game_id: str


class ReplayHarness:
    """Runs one recorded action log through two fresh runtimes so their results can be compared."""

    def __init__(self, rules_profile: str = "nfhs") -> None:
        self.rules_profile = rules_profile
        self.actions: list[ReplayAction] = []

    def record(self, action_type: str, payload: dict, game_id: str) -> None:
        self.actions.append(ReplayAction(action_type=str(action_type), payload=payload, game_id=game_id))

    def save(self, path: Path) -> None:
        path.write_text(
            json.dumps({"rules_profile": self.rules_profile, "actions": [a.__dict__ for a in self.actions]}, indent=2),
            encoding="utf-8",
        )

    @staticmethod
    def load(path: Path) -> ReplayHarness:
        data = json.loads(path.read_text(encoding="utf-8"))
        harness = ReplayHarness(rules_profile=str(data.get("rules_profile", "nfhs")))
        for raw in data["actions"]:
            harness.actions.append(ReplayAction(action_type=raw["action_type"], payload=raw["payload"], game_id=raw["game_id"]))
        return harness

    def replay(self, root: Path) -> tuple[dict, dict]:
        runtime_a = ScorekeeperRuntime(root=root / "replay_a", rules_profile=self.rules_profile)
        runtime_b = ScorekeeperRuntime(root=root / "replay_b", rules_profile=self.rules_profile)

        for action in self.actions:
            runtime_a.handle_action(ActionRequest(make_id("req"), action.action_type, action.payload, action.game_id))
            runtime_b.handle_action(ActionRequest(make_id("req"), action.action_type, action.payload, action.game_id))

        return self._fingerprint(runtime_a), self._fingerprint(runtime_b)

    def _fingerprint(self, runtime: ScorekeeperRuntime) -> dict:
        if runtime.halted:
            raise RuntimeError(f"replay runtime halted; forensic={runtime.last_forensic_path}")
        return {game_id: _game_fingerprint(runtime.games[game_id]) for game_id in sorted(runtime.games)}


def _game_fingerprint(game: Game) -> dict:
    # generated play ids differ between runs
    drive = game.drive
    return {
        "home_score": game.home_score,
        "opp_score": game.opp_score,
        "plays": [[p.play_type.value, p.yards, p.team_side.value, p.quarter] for p in game.plays],
        "team_stats": game.team_stats,
        "player_stats": {p.player_id: p.stats for p in [*game.home_roster, *game.away_roster]},
        "drive": None
        if drive is None
        else {
            "possession": drive.possession.value,
            "down": drive.down,
            "distance": drive.distance,
            "field_position": drive.field_position,
            "quarter": drive.quarter,
            "clock_seconds": drive.clock_seconds,
            "pending": pending_name(drive.pending),
        },
    }
