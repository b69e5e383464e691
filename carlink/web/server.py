import asyncio
import json
import logging
import math
from typing import Any

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from carlink import event_bus
from carlink.config import config
from carlink.hw.serial_link import SerialLink
from carlink.mapper import CommandMapper
from carlink.messages import AxisSample, ConnectionState, DpadButton, DpadEvent
from carlink.nodes.device import DeviceNode
from carlink.nodes.drive import DriveNode
from carlink.nodes.gamepad import GamepadNode

logger = logging.getLogger(__name__)

app = FastAPI()

link = SerialLink()
mapper = CommandMapper(
    link,
    deadzone=config.controller.deadzone,
    dpad_speed=config.controller.dpad_speed,
)
drive_node = DriveNode(mapper)
gamepad_node = GamepadNode()
device_node = DeviceNode()


def _log_inbound(data: bytes) -> None:
    logger.debug("Device says: %s", data.decode("ascii", errors="replace"))


link.add_listener(_log_inbound)


@app.on_event("startup")
async def on_startup() -> None:
    # DriveNode must be subscribed before anything publishes
    await drive_node.start()
    asyncio.create_task(device_node.start())
    if config.controller.enabled:
        asyncio.create_task(gamepad_node.start())


@app.on_event("shutdown")
async def on_shutdown() -> None:
    device_node.stop()
    if config.controller.enabled:
        gamepad_node.stop()
    drive_node.stop()


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/status")
async def get_status() -> dict[str, Any]:
    """Состояние для экрана: подключения, последняя команда, скорость в %"""
    state = mapper.display()
    return {
        "controller": state.controller.value,
        "serial": state.serial.value,
        "last_command": state.last_command,
        "speed_percent": state.speed_percent,
    }


@app.get("/api/config")
async def get_config() -> dict[str, Any]:
    """Получить конфигурацию для фронтенда"""
    return {
        "controller": {
            "deadzone": config.controller.deadzone,
            "dpad_speed": config.controller.dpad_speed,
        },
        "serial": {
            "port": config.serial.port,
            "vendor_id": config.serial.vendor_id,
            "product_id": config.serial.product_id,
        },
    }


def _axis(msg: dict[str, Any], name: str) -> float:
    value = float(msg.get(name, 0.0))
    if not math.isfinite(value) or abs(value) > 1.0:
        raise ValueError(f"axis {name} out of range: {value!r}")
    return value


async def _handle_control(msg: dict[str, Any]) -> None:
    msg_type = msg.get("type")
    if msg_type == "axes":
        sample = AxisSample(y=_axis(msg, "y"), x=_axis(msg, "x"))
        await event_bus.publish_axes(sample)

    elif msg_type == "dpad":
        pressed = msg.get("pressed", False)
        if not isinstance(pressed, bool):
            raise TypeError(f"pressed must be a boolean, got {pressed!r}")
        event = DpadEvent(DpadButton(msg["button"]), pressed)
        await event_bus.publish_dpad(event)

    elif msg_type == "stop":
        await event_bus.publish_axes(AxisSample(y=0.0, x=0.0))

    else:
        logger.warning("Unknown control message type: %r", msg_type)


@app.websocket("/ws/control")
async def ws_control(ws: WebSocket) -> None:
    await ws.accept()
    await event_bus.publish_controller_state(ConnectionState.CONNECTED)
    try:
        while True:
            msg_text = await ws.receive_text()
            try:
                await _handle_control(json.loads(msg_text))
            except (ValueError, KeyError, TypeError, AttributeError, OverflowError) as e:
                logger.warning("Ignoring malformed control message %r: %s", msg_text, e)

    except WebSocketDisconnect:
        pass
    finally:
        # Any way out of this loop counts as losing the controller
        await event_bus.publish_controller_state(ConnectionState.DISCONNECTED)
