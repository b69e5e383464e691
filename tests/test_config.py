"""Тесты для конфигурации."""

import pytest
from pydantic import ValidationError

from carlink.config import Config, ControllerConfig, SerialConfig


def test_controller_config_defaults() -> None:
    """Проверка дефолтных значений ControllerConfig."""
    config = ControllerConfig()

    assert config.deadzone == 0.2
    assert config.dpad_speed == 200
    assert config.fb_axis == 1
    assert config.lr_axis == 2
    assert config.dpad_buttons == {"up": 11, "down": 12, "left": 13, "right": 14}


def test_serial_config_defaults_to_arduino_uno() -> None:
    """По умолчанию ищется Arduino Uno, явный порт не задан."""
    config = SerialConfig()

    assert config.port is None
    assert config.vendor_id == 0x2341
    assert config.product_id == 0x0043


def test_serial_config_accepts_pyserial_url() -> None:
    """Явный порт может быть URL pyserial."""
    config = SerialConfig(port="loop://")

    assert config.port == "loop://"


def test_dpad_speed_is_bounded() -> None:
    """Скорость D-pad не может выйти за пределы байта."""
    with pytest.raises(ValidationError):
        ControllerConfig(dpad_speed=256)


def test_deadzone_must_be_below_one() -> None:
    """Мёртвая зона 1.0 сделала бы стики бесполезными."""
    with pytest.raises(ValidationError):
        ControllerConfig(deadzone=1.0)


def test_root_config_composes_sections() -> None:
    """Главная конфигурация содержит все секции."""
    config = Config()

    assert config.server.port == 8000
    assert config.serial.poll_interval_s == 1.0
    assert config.controller.enabled is True
