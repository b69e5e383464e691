"""Serial port discovery via pyserial's port enumeration."""

import logging
from collections.abc import Iterable

from serial.tools import list_ports
from serial.tools.list_ports_common import ListPortInfo

logger = logging.getLogger(__name__)

# Arduino Uno
DEFAULT_VENDOR_ID = 0x2341
DEFAULT_PRODUCT_ID = 0x0043


def available_ports() -> set[str]:
    return {p.device for p in list_ports.comports()}


def select_port(
    ports: Iterable[ListPortInfo] | None = None,
    vendor_id: int = DEFAULT_VENDOR_ID,
    product_id: int = DEFAULT_PRODUCT_ID,
) -> str | None:
    """
    Выбрать порт для подключения.

    Порт подходит, если совпадает vendor id ИЛИ product id эталонной платы.
    Если ничего не подошло, берётся первый доступный порт.

    Args:
        ports: Список портов (по умолчанию ``comports()``)
        vendor_id: USB vendor id эталонной платы
        product_id: USB product id эталонной платы

    Returns:
        Имя устройства или None, если портов нет
    """
    candidates = list(list_ports.comports() if ports is None else ports)
    if not candidates:
        logger.info("No serial ports found")
        return None

    for port in candidates:
        # OR, not AND: either identifier is enough
        if port.vid == vendor_id or port.pid == product_id:
            logger.info("Selected %s (%s)", port.device, port.description)
            return port.device

    fallback = candidates[0]
    logger.info("No known board found, falling back to %s", fallback.device)
    return fallback.device
