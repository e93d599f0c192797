"""Application entry point for the authentication service."""

import uvicorn

from aibtcauth.app import App
from aibtcauth.config import Config
from aibtcauth.logging import setup_logging
from aibtcauth.web.server import create_fastapi_app


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    fastapi_app = create_fastapi_app(App(config), config)
    # log_config=None leaves uvicorn's loggers on the handlers setup_logging installed
    uvicorn.run(fastapi_app, host=config.host, port=config.port, log_config=None)


if __name__ == "__main__":
    main()
