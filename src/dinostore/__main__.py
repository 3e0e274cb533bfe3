"""Run the dino service with uvicorn."""

import uvicorn

from dinostore.api import create_app
from dinostore.config import get_settings
from dinostore.logging_config import build_logging_config, configure_logging


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=build_logging_config(settings.log_level),
    )


if __name__ == "__main__":
    main()
