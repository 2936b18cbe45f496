"""
Event Bus - In-process named publish/subscribe transport

Handlers are attached to a channel with ``register`` (receives the payload)
or ``subscribe`` (receives the channel and the payload, for whole-bus
listeners such as a UI bridge). ``emit`` calls every handler attached at
emit time, synchronously and in attachment order. A handler that returns a
coroutine is scheduled on the running loop and never awaited by ``emit``;
``join()`` waits for those scheduled handlers.

The bus is not a queue: nothing is stored, replayed or retried.
"""

import asyncio
import inspect
import traceback
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Set

from ava_orchestrator.utils.exceptions import SchemaValidationError
from ava_orchestrator.utils.logger import get_logger
from ava_orchestrator.utils.validation import validate_channel_payload

logger = get_logger(__name__)

Handler = Callable[[Any], Any]
Listener = Callable[[str, Any], Any]

WILDCARD = "*"


@dataclass
class EventSubscription:
    """A listener attached with ``subscribe``."""
    channel: str
    listener: Listener
    subscriber_name: str = "unknown"
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())


class EventBus:
    """
    Named publish/subscribe bus shared by all agents.

    Usage:
        bus = EventBus()

        async def on_result(payload):
            await task_manager.handle_observer_result(payload)

        bus.register("observer-task-manager", on_result)
        bus.emit("observer-task-manager", {"taskId": "T1", "status": "completed"})
        await bus.join()
    """

    def __init__(self, validate_payloads: bool = False):
        """
        Args:
            validate_payloads: Reject payloads that don't match the channel registry
        """
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)
        self._subscriptions: Dict[str, List[EventSubscription]] = defaultdict(list)
        self._pending: Set[asyncio.Task] = set()
        self.validate_payloads = validate_payloads

        self.stats = {
            "events_emitted": 0,
            "events_undelivered": 0,
            "handlers_executed": 0,
            "handlers_failed": 0,
            "async_handlers_scheduled": 0,
        }

        logger.info("[EVENT_BUS] Event Bus initialized")

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, channel: str, handler: Handler) -> None:
        """Attach ``handler(payload)`` to ``channel``."""
        self._handlers[channel].append(handler)
        logger.debug(f"[EVENT_BUS] Handler registered: {_name_of(handler)} → {channel}")

    def unregister(self, channel: str, handler: Handler) -> bool:
        """
        Detach ``handler`` from ``channel``.

        Returns:
            True if the handler was attached
        """
        handlers = self._handlers.get(channel, [])
        if handler in handlers:
            handlers.remove(handler)
            logger.debug(f"[EVENT_BUS] Handler removed: {_name_of(handler)} → {channel}")
            return True
        return False

    def subscribe(self, channel: str, listener: Listener, subscriber_name: str = "unknown") -> EventSubscription:
        """
        Attach ``listener(channel, payload)`` to ``channel`` or to every channel with ``"*"``.

        Returns:
            The subscription, to be passed to ``unsubscribe``
        """
        subscription = EventSubscription(channel=channel, listener=listener, subscriber_name=subscriber_name)
        self._subscriptions[channel].append(subscription)
        logger.debug(f"[EVENT_BUS] Subscription added: {subscriber_name} → {channel}")
        return subscription

    def unsubscribe(self, subscription: EventSubscription) -> bool:
        subs = self._subscriptions.get(subscription.channel, [])
        if subscription in subs:
            subs.remove(subscription)
            logger.debug(f"[EVENT_BUS] Subscription removed: {subscription.subscriber_name} → {subscription.channel}")
            return True
        return False

    def has_listeners(self, channel: str) -> bool:
        """True if an emit on ``channel`` would reach at least one channel specific handler."""
        return bool(self._handlers.get(channel)) or bool(self._subscriptions.get(channel))

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    def emit(self, channel: str, payload: Any) -> int:
        """
        Deliver ``payload`` to every handler attached to ``channel``.

        Handler failures are logged and counted, never raised to the emitter.

        Returns:
            Number of handlers invoked

        Raises:
            SchemaValidationError: If validation is enabled and the payload doesn't match
        """
        if self.validate_payloads:
            result = validate_channel_payload(channel, payload)
            if not result:
                logger.error(f"[EVENT_BUS] Rejected payload on {channel}: {result}")
                raise SchemaValidationError(channel, result.errors, payload)

        self.stats["events_emitted"] += 1
        logger.info(f"📢 [EVENT_BUS] EMIT {channel}")
        logger.debug(f"[EVENT_BUS] Payload: {payload}")

        # Snapshot so handlers attached during delivery only see later emits
        handlers = list(self._handlers.get(channel, []))
        subscriptions = list(self._subscriptions.get(channel, [])) + list(self._subscriptions.get(WILDCARD, []))

        invoked = 0
        for handler in handlers:
            self._invoke(channel, _name_of(handler), handler, payload)
            invoked += 1
        for subscription in subscriptions:
            self._invoke(channel, subscription.subscriber_name, subscription.listener, channel, payload)
            invoked += 1

        if invoked == 0:
            self.stats["events_undelivered"] += 1
            logger.debug(f"[EVENT_BUS] No listeners on {channel}")

        return invoked

    def _invoke(self, channel: str, name: str, func: Callable, *args: Any) -> None:
        try:
            outcome = func(*args)
        except Exception as e:
            self.stats["handlers_failed"] += 1
            logger.error(f"[EVENT_BUS] Handler {name} failed on {channel}: {e}")
            logger.debug(traceback.format_exc())
            return

        self.stats["handlers_executed"] += 1

        if inspect.isawaitable(outcome):
            self._schedule(channel, name, outcome)

    def _schedule(self, channel: str, name: str, awaitable: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.error(f"[EVENT_BUS] Async handler {name} on {channel} dropped: no running event loop")
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return

        task = loop.create_task(self._run_async_handler(channel, name, awaitable))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        self.stats["async_handlers_scheduled"] += 1

    async def _run_async_handler(self, channel: str, name: str, awaitable: Any) -> None:
        try:
            await awaitable
        except Exception as e:
            self.stats["handlers_failed"] += 1
            logger.error(f"[EVENT_BUS] Async handler {name} failed on {channel}: {e}")
            logger.debug(traceback.format_exc())

    async def join(self) -> None:
        """
        Wait until every scheduled async handler has finished, including
        handlers scheduled by those handlers.
        """
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def channels(self) -> List[str]:
        """Channels with at least one handler or subscription."""
        names = {c for c, h in self._handlers.items() if h}
        names.update(c for c, s in self._subscriptions.items() if s)
        return sorted(names)

    def get_statistics(self) -> Dict[str, Any]:
        """Get event bus statistics."""
        return {
            **self.stats,
            "registered_handlers": sum(len(h) for h in self._handlers.values()),
            "subscriptions": sum(len(s) for s in self._subscriptions.values()),
            "pending_async_handlers": len(self._pending),
        }

    def clear(self) -> None:
        """Detach every handler and subscription."""
        self._handlers.clear()
        self._subscriptions.clear()
        logger.info("[EVENT_BUS] All handlers cleared")


def _name_of(func: Callable) -> str:
    return getattr(func, "__qualname__", None) or getattr(func, "__name__", None) or repr(func)


# Global event bus instance
_global_event_bus: Optional[EventBus] = None


def get_event_bus() -> EventBus:
    """
    Get the global event bus instance (singleton).

    Returns:
        Global EventBus instance
    """
    global _global_event_bus
    if _global_event_bus is None:
        _global_event_bus = EventBus()
    return _global_event_bus


def reset_event_bus() -> None:
    """Drop the global event bus (used between tests)."""
    global _global_event_bus
    _global_event_bus = None
