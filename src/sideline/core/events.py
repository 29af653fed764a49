from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, DefaultDict

from sideline.contracts import GameEvent
from sideline.core.ids import make_id, now_utc

GameEventHandler = Callable[[GameEvent], None]


class EventBus:
    def __init__(self) -> None:
        self._handlers: list[GameEventHandler] = []
        self._counter: DefaultDict[str, int] = defaultdict(int)

    def subscribe(self, handler: GameEventHandler) -> None:
        self._handlers.append(handler)

    def publish(self, event: GameEvent) -> None:
        self._counter[event.scope] += 1
        for handler in self._handlers:
            handler(event)

    def emit(self, scope: str, event_type: str, game_id: str, **detail: Any) -> GameEvent:
        event = GameEvent(
            event_id=make_id("evt"),
            time=now_utc(),
            scope=scope,
            event_type=event_type,
            game_id=game_id,
            detail=detail,
        )
        self.publish(event)
        return event

    def emitted_count(self, scope: str | None = None) -> int:
        if scope is None:
            return sum(self._counter.values())
        return self._counter[scope]
