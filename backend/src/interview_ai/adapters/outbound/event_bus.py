"""In-process delivery of provider events to alerting subscribers.

Exhaustion and breaker events are raised after the store write that caused
them has committed, so a subscriber failure has nothing to roll back: it is
logged under the subscriber's name and counted, and the publisher carries on.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Coroutine

import structlog

from interview_ai.domain.events import DomainEvent
from interview_ai.ports.outbound import EventBusPort

logger = structlog.get_logger(__name__)

EventHandler = Callable[[DomainEvent], Coroutine[Any, Any, None]]


def _subscriber_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class InProcessEventBus(EventBusPort):
    def __init__(self) -> None:
        self._subscribers: dict[str, tuple[EventHandler, ...]] = {}

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._subscribers[event_type] = (*self._subscribers.get(event_type, ()), handler)
        logger.debug(
            "event_subscriber_added",
            event_type=event_type,
            subscriber=_subscriber_name(handler),
        )

    def handler_count(self, event_type: str) -> int:
        return len(self._subscribers.get(event_type, ()))

    async def publish(self, event: DomainEvent) -> int:
        subscribers = self._subscribers.get(event.event_type, ())
        outcomes = await asyncio.gather(
            *(handler(event) for handler in subscribers),
            return_exceptions=True,
        )

        failed = 0
        for handler, outcome in zip(subscribers, outcomes):
            if isinstance(outcome, Exception):
                failed += 1
                logger.error(
                    "event_subscriber_failed",
                    event_type=event.event_type,
                    codename=getattr(event, "codename", ""),
                    subscriber=_subscriber_name(handler),
                    error=str(outcome),
                )

        logger.debug(
            "event_delivered",
            event_type=event.event_type,
            codename=getattr(event, "codename", ""),
            subscribers=len(subscribers),
            failed=failed,
        )
        return failed
