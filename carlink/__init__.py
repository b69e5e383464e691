import logging

from .bus import EventBus

# Configure logging for the carlink package
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:     %(name)s - %(message)s",
)

event_bus = EventBus()
