import asyncio
from collections import defaultdict
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

from carlink.messages import AxisSample, ConnectionState, DeviceEvent, DpadEvent

T = TypeVar("T")
Handler = Callable[[T], Coroutine[Any, Any, None]]

AXES_TOPIC = "controller/axes"
DPAD_TOPIC = "controller/dpad"
CONTROLLER_TOPIC = "controller/connection"
DEVICE_TOPIC = "serial/device"


class EventBus:
    def __init__(self) -> None:
        self._subscribers: dict[str, list[Handler[Any]]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def subscribe(self, topic: str, handler: Handler[T]) -> None:
        async with self._lock:
            self._subscribers[topic].append(handler)  # type: ignore[arg-type]

    async def publish(self, topic: str, message: T) -> None:
        async with self._lock:
            handlers = list(self._subscribers.get(topic, []))
        if not handlers:
            return
        # Handlers run one after another so the mapper never sees overlapping events
        for handler in handlers:
            await handler(message)

    async def publish_axes(self, sample: AxisSample) -> None:
        await self.publish(AXES_TOPIC, sample)

    async def publish_dpad(self, event: DpadEvent) -> None:
        await self.publish(DPAD_TOPIC, event)

    async def publish_controller_state(self, state: ConnectionState) -> None:
        await self.publish(CONTROLLER_TOPIC, state)

    async def publish_device(self, event: DeviceEvent) -> None:
        await self.publish(DEVICE_TOPIC, event)
