import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

import structlog

CHALLENGE_LOGGER_NAME = "challenge_lifecycle"


def setup_logging(
    log_level: str = "INFO",
    log_to_file: bool = True,
    logs_dir: Union[str, Path] = "logs",
) -> None:
    """Set up logging configuration for the alarm engine.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Whether to log to files in addition to console
        logs_dir: Directory for the rotating log files
    """
    level = getattr(logging, log_level.upper())

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.set_exc_info,
            # JSON formatting for file logs
            (
                structlog.processors.JSONRenderer()
                if log_to_file
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    if log_to_file:
        logs_path = Path(logs_dir)
        logs_path.mkdir(parents=True, exist_ok=True)

        # General application log file
        app_handler = logging.handlers.RotatingFileHandler(
            logs_path / "app.log", maxBytes=10 * 1024 * 1024, backupCount=5  # 10MB
        )
        app_handler.setLevel(logging.INFO)
        app_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
            )
        )
        root_logger.addHandler(app_handler)

        # Challenge lifecycle audit trail
        challenge_handler = logging.handlers.RotatingFileHandler(
            logs_path / "challenges.log",
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=10,
        )
        challenge_handler.setLevel(logging.INFO)
        challenge_handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
        challenge_logger = logging.getLogger(CHALLENGE_LOGGER_NAME)
        challenge_logger.addHandler(challenge_handler)
        challenge_logger.propagate = True  # Also send to root logger

        # Error-only log file
        error_handler = logging.handlers.RotatingFileHandler(
            logs_path / "errors.log", maxBytes=5 * 1024 * 1024, backupCount=10  # 5MB
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
            )
        )
        root_logger.addHandler(error_handler)


def get_challenge_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """Get a structured logger for challenge lifecycle records."""
    return structlog.get_logger(name or CHALLENGE_LOGGER_NAME)


def log_challenge_event(
    event: str,
    challenge_id: str,
    logger: Optional[structlog.BoundLogger] = None,
    **details: Any,
) -> None:
    """Record one challenge lifecycle transition (opened, success, failed).

    Args:
        event: Transition name
        challenge_id: Affected challenge
        logger: Logger to use (creates one if not provided)
        **details: Transition-specific context (alarm, attempts ...)
    """
    if logger is None:
        logger = get_challenge_logger()

    logger.info(
        f"Challenge {event}",
        event_type=event,
        challenge_id=challenge_id,
        timestamp=datetime.now().isoformat(),
        **details,
    )
