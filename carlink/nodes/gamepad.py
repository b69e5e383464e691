"""
Local gamepad input via pygame.
Publishes axis samples, D-pad presses and controller presence to the event bus.
"""

import asyncio
import logging
import os
from typing import Any

import pygame

from carlink import event_bus
from carlink.config import ControllerConfig, config
from carlink.messages import AxisSample, ConnectionState, DpadButton, DpadEvent

logger = logging.getLogger(__name__)

GamepadMessage = AxisSample | DpadEvent | ConnectionState


def _hat_buttons(value: tuple[int, int]) -> set[DpadButton]:
    x, y = value
    buttons = set()
    if x < 0:
        buttons.add(DpadButton.LEFT)
    elif x > 0:
        buttons.add(DpadButton.RIGHT)
    if y > 0:
        buttons.add(DpadButton.UP)
    elif y < 0:
        buttons.add(DpadButton.DOWN)
    return buttons


class GamepadNode:
    def __init__(self, cfg: ControllerConfig | None = None) -> None:
        self.cfg = cfg or config.controller
        self._axes = {self.cfg.fb_axis: 0.0, self.cfg.lr_axis: 0.0}
        self._hat: tuple[int, int] = (0, 0)
        self._buttons = {index: DpadButton(name) for name, index in self.cfg.dpad_buttons.items()}
        self._joystick: Any = None
        self._instance_id: int | None = None
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        # Event queue needs a video driver, even on a headless Pi
        os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
        pygame.init()
        pygame.joystick.init()
        logger.info("Gamepad polling started, %d joystick(s) present", pygame.joystick.get_count())
        # pygame reports already attached joysticks as JOYDEVICEADDED on the first poll
        self._task = asyncio.create_task(self._poll())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
        pygame.quit()

    async def _poll(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.cfg.poll_interval_s)

    async def poll_once(self) -> None:
        try:
            events = pygame.event.get()
        except pygame.error as e:
            logger.error("Gamepad polling error: %s", e)
            return
        for event in events:
            for message in self.translate(event):
                await self._publish(message)

    def translate(self, event: Any) -> list[GamepadMessage]:
        """Turn one pygame event into bus messages."""
        if event.type == pygame.JOYDEVICEADDED:
            return self._on_added(event.device_index)
        if event.type == pygame.JOYDEVICEREMOVED:
            return self._on_removed(event.instance_id)

        instance_id = getattr(event, "instance_id", self._instance_id)
        if self._instance_id is not None and instance_id != self._instance_id:
            return []

        if event.type == pygame.JOYAXISMOTION:
            if event.axis not in self._axes:
                return []
            self._axes[event.axis] = event.value
            return [AxisSample(y=self._axes[self.cfg.fb_axis], x=self._axes[self.cfg.lr_axis])]

        if event.type == pygame.JOYHATMOTION:
            old, new = _hat_buttons(self._hat), _hat_buttons(tuple(event.value))
            self._hat = tuple(event.value)
            released = [DpadEvent(b, False) for b in DpadButton if b in old - new]
            pressed = [DpadEvent(b, True) for b in DpadButton if b in new - old]
            return released + pressed

        if event.type in (pygame.JOYBUTTONDOWN, pygame.JOYBUTTONUP):
            button = self._buttons.get(event.button)
            if button is None:
                return []
            return [DpadEvent(button, event.type == pygame.JOYBUTTONDOWN)]

        return []

    def _on_added(self, device_index: int) -> list[GamepadMessage]:
        if self._instance_id is not None or device_index != self.cfg.joystick_index:
            return []
        self._joystick = pygame.joystick.Joystick(device_index)
        self._instance_id = self._joystick.get_instance_id()
        logger.info("Controller attached: %s", self._joystick.get_name())
        return [ConnectionState.CONNECTED]

    def _on_removed(self, instance_id: int) -> list[GamepadMessage]:
        if instance_id != self._instance_id:
            return []
        logger.info("Controller detached")
        self._joystick = None
        self._instance_id = None
        self._axes = dict.fromkeys(self._axes, 0.0)
        self._hat = (0, 0)
        return [ConnectionState.DISCONNECTED]

    @staticmethod
    async def _publish(message: GamepadMessage) -> None:
        if isinstance(message, AxisSample):
            await event_bus.publish_axes(message)
        elif isinstance(message, DpadEvent):
            await event_bus.publish_dpad(message)
        else:
            await event_bus.publish_controller_state(message)
