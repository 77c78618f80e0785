# server/main.py
import logging

import uvicorn

from .config import Settings, get_settings

logger = logging.getLogger("nexis")


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _key_prefix(key: str) -> str:
    return key[:8] + "..." if len(key) >= 8 else "(short key)"


def run() -> None:
    settings = get_settings()
    configure_logging(settings)

    if settings.groq_api_key:
        logger.info("Groq key prefix: %s", _key_prefix(settings.groq_api_key))
    else:
        logger.warning("No GROQ_API_KEY found; /nexis will answer 500 until it is set.")
    logger.info("Using Groq model: %s", settings.groq_model)

    uvicorn.run(
        "nexis.server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
