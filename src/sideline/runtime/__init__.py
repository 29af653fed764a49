from .replay import ReplayAction, ReplayHarness
from .scorekeeper import RuntimePaths, ScorekeeperRuntime

__all__ = ["ReplayAction", "ReplayHarness", "RuntimePaths", "ScorekeeperRuntime"]
