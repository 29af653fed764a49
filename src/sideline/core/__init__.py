from .errors import DriveTransitionError, EngineIntegrityError, build_forensic_artifact, persist_forensic_artifact
from .events import EventBus
from .ids import coerce_datetime, make_id, now_utc
from .rules import default_rules_profiles, resolve_rules, validate_rules

__all__ = [
    "DriveTransitionError",
    "EngineIntegrityError",
    "EventBus",
    "build_forensic_artifact",
    "coerce_datetime",
    "default_rules_profiles",
    "make_id",
    "now_utc",
    "persist_forensic_artifact",
    "resolve_rules",
    "validate_rules",
]
