"""
USB-serial link to the car's microcontroller.
Owns a single pyserial connection: 9600 baud, 8-N-1, no flow control.
"""

import logging
from collections.abc import Callable
from functools import partial
from typing import Any

import serial
from serial.threaded import Protocol, ReaderThread

from carlink.messages import LinkFailure

logger = logging.getLogger(__name__)

BAUD_RATE = 9600
BYTE_SIZE = serial.EIGHTBITS
STOP_BITS = serial.STOPBITS_ONE
PARITY = serial.PARITY_NONE

_LINK_ERRORS = (serial.SerialException, OSError, ValueError)
_READER_ERRORS = _LINK_ERRORS + (RuntimeError,)

Listener = Callable[[bytes], None]


class _InboundProtocol(Protocol):
    """Passive reader: inbound bytes are logged and handed to listeners, never parsed."""

    def __init__(self, link: "SerialLink") -> None:
        self._link = link

    def data_received(self, data: bytes) -> None:
        logger.debug("Received from device: %r", data)
        self._link._dispatch(data)  # noqa: SLF001

    def connection_lost(self, exc: BaseException | None) -> None:
        if exc is not None:
            logger.warning("Serial reader stopped: %s", exc)


class SerialLink:
    def __init__(
        self,
        serial_factory: Callable[..., Any] = serial.serial_for_url,
        reader_factory: Callable[..., Any] = ReaderThread,
    ) -> None:
        self._serial_factory = serial_factory
        self._reader_factory = reader_factory
        self._serial: Any = None
        self._reader: Any = None
        self._listeners: list[Listener] = []
        self._connected = False
        self.device: str | None = None
        self.last_failure: LinkFailure | None = None

    def add_listener(self, callback: Listener) -> None:
        self._listeners.append(callback)

    def connect(self, device: str) -> bool:
        """
        Open the device and start the passive reader.

        Args:
            device: Port name (``/dev/ttyACM0``, ``COM3``) or pyserial URL

        Returns:
            True only if the port is open, configured and being read
        """
        if self._connected:
            logger.warning("Already connected to %s, ignoring connect(%s)", self.device, device)
            return True

        try:
            port = self._serial_factory(device, do_not_open=True)
            port.open()
        except _LINK_ERRORS as e:
            logger.error("Failed to open serial device %s: %s", device, e)
            self.last_failure = LinkFailure.DEVICE_OPEN
            return False

        reader = None
        try:
            port.baudrate = BAUD_RATE
            port.bytesize = BYTE_SIZE
            port.stopbits = STOP_BITS
            port.parity = PARITY
            port.xonxoff = False
            port.rtscts = False
            port.dsrdtr = False

            reader = self._reader_factory(port, partial(_InboundProtocol, self))
            reader.start()
            reader.connect()
        except _READER_ERRORS as e:
            logger.error("Failed to configure serial link on %s: %s", device, e)
            self.last_failure = LinkFailure.LINK_CONFIGURATION
            if reader is not None:
                self._stop_reader(reader)
            self._close_port(port)
            return False

        self._serial = port
        self._reader = reader
        self.device = device
        self._connected = True
        self.last_failure = None
        logger.info("Serial connection established on %s", device)
        return True

    def send(self, data: bytes) -> bool:
        if not self._connected or self._serial is None:
            logger.warning("Not connected, cannot send %r", data)
            self.last_failure = LinkFailure.NOT_CONNECTED
            return False

        try:
            self._serial.write(data)
        except _LINK_ERRORS as e:
            # Link stays marked as connected; a detach event is what disconnects it
            logger.error("Error sending %r: %s", data, e)
            self.last_failure = LinkFailure.WRITE
            return False

        logger.debug("Sent to device: %r", data)
        self.last_failure = None
        return True

    def disconnect(self) -> None:
        self._connected = False
        reader, port = self._reader, self._serial
        self._reader = None
        self._serial = None
        self.device = None

        if reader is not None:
            self._stop_reader(reader)
        if port is not None:
            self._close_port(port)
            logger.info("Serial connection closed")

    def is_connected(self) -> bool:
        return self._connected

    def _dispatch(self, data: bytes) -> None:
        for listener in list(self._listeners):
            try:
                listener(data)
            except Exception:
                logger.exception("Inbound data listener failed")

    @staticmethod
    def _stop_reader(reader: Any) -> None:
        try:
            reader.stop()
        except _READER_ERRORS as e:
            logger.error("Error stopping serial reader: %s", e)

    @staticmethod
    def _close_port(port: Any) -> None:
        try:
            port.close()
        except _LINK_ERRORS as e:
            logger.error("Error closing serial port: %s", e)
