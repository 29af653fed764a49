from __future__ import annotations

from sideline.contracts import GameRules


def default_rules_profiles() -> dict[str, GameRules]:
    return {
        "nfhs": GameRules(profile="nfhs", quarter_length_minutes=12, overtime_length_minutes=10),
        "youth": GameRules(
            profile="youth",
            quarter_length_minutes=8,
            overtime_enabled=False,
            timeouts_per_half=2,
            kickoff_spot=35,
        ),
        "ncaa": GameRules(profile="ncaa", quarter_length_minutes=15, kickoff_spot=35, touchback_spot=25),
        "nfl": GameRules(profile="nfl", quarter_length_minutes=15, kickoff_spot=35, touchback_spot=30),
    }


def resolve_rules(profile: str | None = None, overrides: dict[str, object] | None = None) -> GameRules:
    profiles = default_rules_profiles()
    name = profile or "nfhs"
    if name not in profiles:
        raise ValueError(f"unknown rules profile '{name}'")
    rules = profiles[name]
    for key, value in (overrides or {}).items():
        if not hasattr(rules, key):
            raise ValueError(f"unknown rules field '{key}'")
        setattr(rules, key, value)
    validate_rules(rules)
    return rules


def validate_rules(rules: GameRules | dict[str, object]) -> None:
    if isinstance(rules, dict):
        if "scoring_table" in rules:
            raise ValueError("rules configuration cannot override the scoring table")
        rules = GameRules(**rules)
    rules.validate()
