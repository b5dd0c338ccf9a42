"""Run the masterclass site with uvicorn."""
import logging
import sys

import uvicorn

from masterclass.api import create_app
from masterclass.config import load_settings


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def main() -> None:
    """Server entry point."""
    settings = load_settings()
    configure_logging(settings.log_level)

    app = create_app(settings)
    logging.getLogger(__name__).info(f"Masterclass app running. Port: {settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
