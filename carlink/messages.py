from dataclasses import dataclass
from enum import Enum


class Direction(str, Enum):
    FORWARD = "F"
    BACKWARD = "B"
    LEFT = "L"
    RIGHT = "R"
    STOP = "S"

    @property
    def wire(self) -> bytes:
        return self.value.encode("ascii")


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class DpadButton(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class LinkFailure(str, Enum):
    DEVICE_OPEN = "device_open"
    LINK_CONFIGURATION = "link_configuration"
    WRITE = "write"
    NOT_CONNECTED = "not_connected"


@dataclass(frozen=True)
class DriveCommand:
    direction: Direction
    speed: int = 0  # 0..255

    def __post_init__(self) -> None:
        if not 0 <= self.speed <= 255:
            raise ValueError(f"speed must be in [0, 255], got {self.speed}")


STOP = DriveCommand(Direction.STOP, 0)


@dataclass(frozen=True)
class AxisSample:
    y: float  # forward/backward, stick up reports negative
    x: float  # left/right


@dataclass(frozen=True)
class DpadEvent:
    button: DpadButton
    pressed: bool


@dataclass(frozen=True)
class DeviceEvent:
    device: str | None  # None means the bound device went away


@dataclass
class DisplayState:
    controller: ConnectionState = ConnectionState.DISCONNECTED
    serial: ConnectionState = ConnectionState.DISCONNECTED
    last_command: str = "None"
    speed_percent: int = 0
