import logging
import signal
import sys

import uvicorn

from carlink.config import config
from carlink.web.server import drive_node


def signal_handler(sig, frame):
    print("\n[SHUTDOWN] Stopping the car and closing the serial link...")
    drive_node.stop()
    sys.exit(0)


def main() -> None:
    # Configure logging for the entire application
    logging.basicConfig(
        level=logging.INFO,
        format="%(levelname)s:     %(name)s - %(message)s",
    )

    # Set log level for our modules
    logging.getLogger("carlink").setLevel(logging.INFO)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    uvicorn.run(
        "carlink.web.server:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
