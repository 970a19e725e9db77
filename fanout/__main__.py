import logging
import logging.config
import os

import uvicorn
from uvicorn.config import LOGGING_CONFIG

from fanout.config import ConfigurationError, load_config
from fanout.server import create_app

logger = logging.getLogger("uvicorn.error")


def main() -> int:
    # Same handlers uvicorn installs, so startup errors are visible too
    logging.config.dictConfig(LOGGING_CONFIG)
    logger.setLevel(os.environ.get("LOG_LEVEL", "info").upper())

    try:
        config = load_config()
    except ConfigurationError as e:
        logger.error(f"{e} (exit code {e.exit_code})")
        return e.exit_code

    app = create_app(config)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
