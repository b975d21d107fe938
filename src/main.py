import logging
import os
import socket

import uvicorn

from src.catalog.api import create_app
from src.catalog.config import get_config, get_environment

config = get_config()

logging.basicConfig(
    level=config.logging.level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = create_app(config)


def main() -> None:
    """Run the catalog server on the configured host and port."""
    logger.info(
        f"Starting server on http://{config.server.host}:{config.server.port} "
        f"(hostname: {socket.gethostname()}, environment: {get_environment()}, pid: {os.getpid()})"
    )
    uvicorn.run(app, host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
