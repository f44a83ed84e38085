import logging
import os
import signal
import sys
import threading

import uvicorn

from .app import create_app
from .core.config import SERVICE_SCHEMA
from .core.errors import ConfigurationError
from .core.holder import ConfigHolder
from .core.printer import describe, format_failures
from .core.sources import load_source


logger = logging.getLogger(__name__)


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
        ],
        force=True,
    )


def _install_reload_handler(holder: ConfigHolder) -> None:
    if not hasattr(signal, "SIGHUP"):
        return

    def _reload_in_background():
        try:
            holder.reload()
        except ConfigurationError as e:
            logger.error(format_failures(e))

    # Runs on the event loop thread; keep file I/O and validation off it
    def _reload(signum, frame) -> threading.Thread:
        thread = threading.Thread(target=_reload_in_background, name="config-reload", daemon=True)
        thread.start()
        return thread

    signal.signal(signal.SIGHUP, _reload)


def main() -> int:
    configure_logging()
    env_file = os.getenv("TIERCONF_ENV_FILE", ".env")
    holder = ConfigHolder(SERVICE_SCHEMA, lambda: load_source(env_file))

    try:
        config = holder.load()
    except ConfigurationError as e:
        logger.error(format_failures(e))
        return 1

    server = config.server
    configure_logging(server["LOG_LEVEL"])
    logger.info(describe(config))

    _install_reload_handler(holder)
    uvicorn.run(create_app(holder), host=server["HOST"], port=server["PORT"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
