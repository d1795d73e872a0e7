import uvicorn

from .config import get_settings
from .logging_setup import setup_logging


def main():
    settings = get_settings()
    setup_logging(settings.log_level)
    uvicorn.run(
        "recipebook.app:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
