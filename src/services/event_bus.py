"""
Event Bus - in-process pub-sub between services and the broadcast channel

Publishers: LedStripService (direct writes, brightness) and
AnimationSessionManager (session lifecycle, frames relayed from a runtime).
Subscribers: the Socket.IO broadcaster, tests.

    unsubscribe = bus.subscribe(EventType.ANIMATION_STOPPED, on_stopped, priority=10)
    await bus.publish(AnimationStoppedEvent(strip, StopReason.EXITED, exit_code=1))
    unsubscribe()
"""

import asyncio
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, List, Optional

from models.events import Event, EventType
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.EVENT)

Handler = Callable[[Event], object]
Middleware = Callable[[Event], Optional[Event]]


@dataclass
class Subscription:
    handler: Handler
    priority: int
    filter_fn: Optional[Callable[[Event], bool]]

    @property
    def name(self) -> str:
        return getattr(self.handler, "__name__", repr(self.handler))

    def accepts(self, event: Event) -> bool:
        return self.filter_fn is None or bool(self.filter_fn(event))

    async def dispatch(self, event: Event) -> None:
        result = self.handler(event)
        if asyncio.iscoroutine(result):
            await result


class EventBus:
    """
    Priority-ordered pub-sub with a middleware pipeline

    - handlers may be sync or async
    - higher priority runs first; equal priorities keep subscription order
    - middleware runs before history and handlers; returning None drops the event
    - a failing handler is logged and the remaining handlers still run
    """

    def __init__(self, history_limit: int = 100):
        self._subscriptions: Dict[EventType, List[Subscription]] = {}
        self._middleware: List[Middleware] = []
        self._history: Deque[Event] = deque(maxlen=history_limit)

    def subscribe(
        self,
        event_type: EventType,
        handler: Handler,
        priority: int = 0,
        filter_fn: Optional[Callable[[Event], bool]] = None
    ) -> Callable[[], None]:
        """
        Returns:
            Function that removes this subscription (safe to call twice)
        """
        subscription = Subscription(handler, priority, filter_fn)
        subscriptions = self._subscriptions.setdefault(event_type, [])
        subscriptions.append(subscription)
        # sort is stable: same priority keeps registration order
        subscriptions.sort(key=lambda s: s.priority, reverse=True)

        log.debug("Event handler subscribed", event_type=event_type.name, handler=subscription.name, priority=priority)

        def unsubscribe() -> None:
            if subscription in subscriptions:
                subscriptions.remove(subscription)

        return unsubscribe

    def add_middleware(self, middleware: Middleware) -> None:
        self._middleware.append(middleware)
        log.debug("Middleware registered", middleware=getattr(middleware, "__name__", repr(middleware)))

    async def publish(self, event: Event) -> None:
        for middleware in self._middleware:
            event = middleware(event)
            if event is None:
                return

        self._history.append(event)

        # Copy: a handler may unsubscribe while we iterate
        for subscription in list(self._subscriptions.get(event.type, ())):
            if not subscription.accepts(event):
                continue
            try:
                await subscription.dispatch(event)
            except Exception as e:
                log.error(f"Event handler {subscription.name} failed for {event.type.name}", exception=e)

    def get_event_history(self, limit: int = 10) -> List[Event]:
        """Most recent events, newest last"""
        return list(self._history)[-limit:]

    def clear_history(self) -> None:
        self._history.clear()
