# -*- coding: utf-8 -*-
"""
Event Bus Module

Lets a display or host layer follow the filter effect (parameter changes,
presets, response-curve invalidation) without the effect knowing about it.

Never publish from inside a kernel's process() call: publishing takes a
lock and may start threads.
"""

from dataclasses import dataclass
from typing import Dict, Callable, Any, List, Optional
from enum import Enum
import threading
import uuid
import logging
from concurrent.futures import ThreadPoolExecutor

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Effect notifications"""

    # Lifecycle
    EFFECT_INITIALIZED = "effect_initialized"      # {"sample_rate", "channels"}
    EFFECT_UNINITIALIZED = "effect_uninitialized"  # None
    EFFECT_RESET = "effect_reset"                  # None

    # Parameters
    PARAMETER_CHANGED = "parameter_changed"        # {"parameter", "value"}
    PRESET_CHANGED = "preset_changed"              # {"preset", "name"}

    # Display
    FREQUENCY_RESPONSE_CHANGED = "frequency_response_changed"  # None

    # Offline rendering
    RENDER_COMPLETED = "render_completed"          # {"input", "output", "frames"}

    ERROR_OCCURRED = "error_occurred"              # {"input", "error"}


@dataclass(frozen=True)
class Subscription:
    subscription_id: str
    event_type: EventType
    callback: Callable[[Any], None]


class EventBus:
    """
    Event Bus - Singleton Pattern

    publish() hands callbacks to a small worker pool; publish_sync() runs them
    on the caller's thread. A failing callback is logged and skipped.

    Usage example:
        event_bus = EventBus()

        def on_response_changed(_):
            view.refresh_curve()

        sub_id = event_bus.subscribe(EventType.FREQUENCY_RESPONSE_CHANGED, on_response_changed)
        effect.set_parameter(ParameterId.CUTOFF_FREQUENCY, 800.0)
        event_bus.unsubscribe(sub_id)
    """

    _instance: Optional['EventBus'] = None
    _lock = threading.Lock()

    WORKER_THREADS = 2

    def __new__(cls) -> 'EventBus':
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        # subscription id -> Subscription, plus a per-type index in subscribe order
        self._by_id: Dict[str, Subscription] = {}
        self._by_type: Dict[EventType, List[str]] = {}
        self._executor = ThreadPoolExecutor(
            max_workers=self.WORKER_THREADS, thread_name_prefix="EffectEvents"
        )
        self._sub_lock = threading.Lock()
        self._initialized = True

    def subscribe(self, event_type: EventType, callback: Callable[[Any], None]) -> str:
        """
        Register ``callback`` for one event type.

        Returns:
            str: Subscription ID for unsubscribe()
        """
        subscription = Subscription(str(uuid.uuid4()), event_type, callback)
        with self._sub_lock:
            self._by_id[subscription.subscription_id] = subscription
            self._by_type.setdefault(event_type, []).append(subscription.subscription_id)
        return subscription.subscription_id

    def unsubscribe(self, subscription_id: str) -> bool:
        """Returns False when the ID is unknown or already removed."""
        with self._sub_lock:
            subscription = self._by_id.pop(subscription_id, None)
            if subscription is None:
                return False
            self._by_type[subscription.event_type].remove(subscription_id)
        return True

    def subscriber_count(self, event_type: EventType) -> int:
        with self._sub_lock:
            return len(self._by_type.get(event_type, ()))

    def _callbacks(self, event_type: EventType) -> List[Callable[[Any], None]]:
        with self._sub_lock:
            return [self._by_id[sid].callback for sid in self._by_type.get(event_type, ())]

    def publish(self, event_type: EventType, data: Any = None) -> None:
        """Queue every callback for ``event_type`` on the worker pool."""
        for callback in self._callbacks(event_type):
            self._executor.submit(self._deliver, event_type, callback, data)

    def publish_sync(self, event_type: EventType, data: Any = None) -> int:
        """
        Run every callback for ``event_type`` before returning.

        Returns:
            int: Number of callbacks that completed without raising
        """
        return sum(
            self._deliver(event_type, callback, data)
            for callback in self._callbacks(event_type)
        )

    @staticmethod
    def _deliver(event_type: EventType, callback: Callable[[Any], None], data: Any) -> bool:
        try:
            callback(data)
            return True
        except Exception:
            # Not re-published as ERROR_OCCURRED; a failing error handler would loop
            logger.exception("Callback for %s failed", event_type.value)
            return False

    def clear(self) -> None:
        """Drop all subscriptions"""
        with self._sub_lock:
            self._by_id.clear()
            self._by_type.clear()

    def shutdown(self) -> None:
        """Wait for queued callbacks and stop the workers"""
        self._executor.shutdown(wait=True)

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (for testing only)"""
        with cls._lock:
            if cls._instance is not None:
                cls._instance.shutdown()
                cls._instance = None
