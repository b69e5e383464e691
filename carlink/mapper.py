"""
Gamepad input → drive commands.

One input sample produces at most one command. Forward/backward wins over
left/right only when strictly larger; there are no diagonal commands.
"""

import logging

from carlink.hw.serial_link import SerialLink
from carlink.messages import (
    STOP,
    AxisSample,
    ConnectionState,
    Direction,
    DisplayState,
    DpadButton,
    DriveCommand,
)

logger = logging.getLogger(__name__)

DEADZONE = 0.2
DPAD_SPEED = 200
MAX_SPEED = 255

_DPAD_DIRECTIONS = {
    DpadButton.UP: Direction.FORWARD,
    DpadButton.DOWN: Direction.BACKWARD,
    DpadButton.LEFT: Direction.LEFT,
    DpadButton.RIGHT: Direction.RIGHT,
}

_LABELS = {
    Direction.FORWARD: "Forward",
    Direction.BACKWARD: "Backward",
    Direction.LEFT: "Left",
    Direction.RIGHT: "Right",
}


def to_speed(magnitude: float) -> int:
    """Normalized magnitude 0..1 → 0..255, halves rounded up."""
    return max(0, int(min(MAX_SPEED, magnitude * MAX_SPEED) + 0.5))


def decode_axes(sample: AxisSample, deadzone: float = DEADZONE) -> DriveCommand:
    # Stick up reports negative
    fb = -sample.y if abs(sample.y) > deadzone else 0.0
    lr = sample.x if abs(sample.x) > deadzone else 0.0

    speed = to_speed(max(abs(fb), abs(lr)))

    if abs(fb) > abs(lr) and abs(fb) > deadzone:
        return DriveCommand(Direction.FORWARD if fb > 0 else Direction.BACKWARD, speed)
    if abs(lr) > deadzone:
        return DriveCommand(Direction.RIGHT if lr > 0 else Direction.LEFT, speed)
    return STOP


def dpad_command(button: DpadButton, pressed: bool, speed: int = DPAD_SPEED) -> DriveCommand:
    if not pressed:
        return STOP
    return DriveCommand(_DPAD_DIRECTIONS[button], speed)


def describe(command: DriveCommand) -> str:
    if command.direction is Direction.STOP:
        return "Stop"
    return f"{_LABELS[command.direction]} (Speed: {command.speed})"


class CommandMapper:
    """
    Coordinates controller input, serial link state and display state.

    All handlers are expected to be called from one execution context
    (the asyncio loop via DriveNode).
    """

    def __init__(
        self,
        link: SerialLink,
        deadzone: float = DEADZONE,
        dpad_speed: int = DPAD_SPEED,
    ) -> None:
        self.link = link
        self.deadzone = deadzone
        self.dpad_speed = dpad_speed
        self.controller_state = ConnectionState.DISCONNECTED
        self.serial_state = ConnectionState.DISCONNECTED
        self.last_command = "None"
        self.speed_percent = 0

    def on_axes(self, sample: AxisSample) -> DriveCommand:
        command = decode_axes(sample, self.deadzone)
        self.send_command(command)
        return command

    def on_dpad(self, button: DpadButton, pressed: bool) -> DriveCommand:
        command = dpad_command(button, pressed, self.dpad_speed)
        self.send_command(command)
        return command

    def on_controller_connected(self) -> None:
        self.controller_state = ConnectionState.CONNECTED
        logger.info("Controller connected")

    def on_controller_disconnected(self) -> None:
        self.controller_state = ConnectionState.DISCONNECTED
        logger.info("Controller disconnected, stopping")
        self.send_command(STOP)

    def on_device_ready(self, device: str) -> bool:
        if not self.link.connect(device):
            return False
        self.serial_state = ConnectionState.CONNECTED
        self.send_command(STOP)
        return True

    def on_device_detached(self) -> None:
        self.serial_state = ConnectionState.DISCONNECTED
        self.link.disconnect()

    def shutdown(self) -> None:
        # Stop goes out before the link is closed
        self.send_command(STOP)
        self.serial_state = ConnectionState.DISCONNECTED
        self.link.disconnect()

    def send_command(self, command: DriveCommand) -> bool:
        if self.serial_state is not ConnectionState.CONNECTED:
            return False
        if not self.link.send(command.direction.wire):
            return False

        self.last_command = describe(command)
        # Display percent is recomputed from the transmitted 0..255 speed
        self.speed_percent = command.speed * 100 // MAX_SPEED
        return True

    def display(self) -> DisplayState:
        return DisplayState(
            controller=self.controller_state,
            serial=self.serial_state,
            last_command=self.last_command,
            speed_percent=self.speed_percent,
        )
