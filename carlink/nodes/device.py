import asyncio
import logging
from collections.abc import Callable

from carlink import event_bus
from carlink.config import SerialConfig, config
from carlink.hw.discovery import available_ports, select_port
from carlink.messages import DeviceEvent

logger = logging.getLogger(__name__)


class DeviceNode:
    """Watches serial ports and announces when the car's board appears or goes away."""

    def __init__(
        self,
        cfg: SerialConfig | None = None,
        scan: Callable[[], set[str]] = available_ports,
        select: Callable[..., str | None] = select_port,
    ) -> None:
        self.cfg = cfg or config.serial
        self._scan = scan
        self._select = select
        self.device: str | None = None
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        if self.cfg.port is not None:
            # Explicit ports (including pyserial URLs) are not tracked for detach
            self.device = self.cfg.port
            await event_bus.publish_device(DeviceEvent(self.device))
            return
        await self.check()
        self._task = asyncio.create_task(self._watch())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def check(self) -> None:
        if self.device is not None:
            if self.device not in self._scan():
                logger.info("Serial device %s detached", self.device)
                self.device = None
                await event_bus.publish_device(DeviceEvent(None))
            return

        device = self._select(vendor_id=self.cfg.vendor_id, product_id=self.cfg.product_id)
        if device is not None:
            self.device = device
            await event_bus.publish_device(DeviceEvent(device))

    async def _watch(self) -> None:
        while True:
            await asyncio.sleep(self.cfg.poll_interval_s)
            await self.check()
