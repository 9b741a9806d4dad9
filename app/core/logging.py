import logging

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup_logging(level: str = "INFO"):
    """Configures the root logger. NONE silences all application logging."""
    level = (level or "INFO").upper()
    if level == "NONE":
        logging.disable(logging.CRITICAL)
        return
    logging.disable(logging.NOTSET)
    logging.basicConfig(
        level=LEVELS.get(level, logging.INFO),
        format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
    )
    logging.getLogger().setLevel(LEVELS.get(level, logging.INFO))
