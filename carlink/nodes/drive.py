from carlink import event_bus
from carlink.bus import AXES_TOPIC, CONTROLLER_TOPIC, DEVICE_TOPIC, DPAD_TOPIC
from carlink.mapper import CommandMapper
from carlink.messages import AxisSample, ConnectionState, DeviceEvent, DpadEvent


class DriveNode:
    def __init__(self, mapper: CommandMapper) -> None:
        self.mapper = mapper

    async def start(self) -> None:
        await event_bus.subscribe(AXES_TOPIC, self._on_axes)
        await event_bus.subscribe(DPAD_TOPIC, self._on_dpad)
        await event_bus.subscribe(CONTROLLER_TOPIC, self._on_controller)
        await event_bus.subscribe(DEVICE_TOPIC, self._on_device)

    def stop(self) -> None:
        self.mapper.shutdown()

    async def _on_axes(self, sample: AxisSample) -> None:
        self.mapper.on_axes(sample)

    async def _on_dpad(self, event: DpadEvent) -> None:
        self.mapper.on_dpad(event.button, event.pressed)

    async def _on_controller(self, state: ConnectionState) -> None:
        if state is ConnectionState.CONNECTED:
            self.mapper.on_controller_connected()
        else:
            self.mapper.on_controller_disconnected()

    async def _on_device(self, event: DeviceEvent) -> None:
        if event.device is None:
            self.mapper.on_device_detached()
        else:
            self.mapper.on_device_ready(event.device)
