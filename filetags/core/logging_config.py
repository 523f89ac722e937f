"""Logging setup for the API process."""
import logging


def configure_logging(level: str = "INFO", sql_echo: bool = False) -> None:
    """Configure root logging and SQLAlchemy statement logging.

    Args:
        level: Root log level name (DEBUG, INFO, ...)
        sql_echo: If True, log SQL statements from ``sqlalchemy.engine``
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if sql_echo else logging.WARNING)
