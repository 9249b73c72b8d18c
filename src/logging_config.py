"""Logging configuration for Volunteer Match."""
import logging
import logging.handlers
from pathlib import Path


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
) -> None:
    """Route scorer, service and CLI log records to the console and an optional file.

    The CLI calls this before dispatching a command and `scripts/seed_demo.py`
    calls it before seeding. Later calls are ignored so tests can install
    their own handlers first.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path for rotating file handler
    """
    root = logging.getLogger()

    if root.handlers:
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    root.addHandler(console)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
        )
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)

    # Keep per-statement SQL out of the match and application logs
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
