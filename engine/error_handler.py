"""
Centralized error handling and logging system.

This module provides:
- Centralized error logging to files
- Toast surfacing of failures for the player
- Custom exception types for different error categories
- Error recovery for the main loop
"""
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional
from datetime import datetime

if TYPE_CHECKING:
    from engine.toasts import ToastLog

# Setup logging directory
LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
LOG_DIR.mkdir(exist_ok=True)

# Configure logger
logger = logging.getLogger("rockmundo")
logger.setLevel(logging.DEBUG)

# Prevent duplicate handlers
if not logger.handlers:
    # File handler for detailed logs
    log_file = LOG_DIR / f"client_{datetime.now().strftime('%Y%m%d')}.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    )

    # Console handler for warnings/errors
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(
        logging.Formatter('%(levelname)s: %(message)s')
    )

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)


class GameError(Exception):
    """Base exception for client errors."""
    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.user_message = user_message or message


class ValidationError(GameError):
    """A form or action failed a local check before reaching the store."""
    pass


class PurchaseError(GameError):
    """An underworld purchase was refused (funds, currency, missing item)."""
    pass


GENERIC_FAILURE = "Something went wrong. Please try again."


def log_error(
    error: Exception,
    context: str = "",
    user_message: Optional[str] = None,
    toasts: Optional["ToastLog"] = None,
    title: Optional[str] = None,
) -> None:
    """
    Log an error with context information.

    Args:
        error: The exception that occurred
        context: Where the error occurred (e.g., "ticket_tiers.save")
        user_message: Description for the toast; falls back to the error's
            own user_message, then to a generic line
        toasts: When given, a destructive toast is pushed
        title: Toast title (defaults to "Error")
    """
    error_type = type(error).__name__
    logger.error(f"Error in {context}: {error_type}: {error}", exc_info=error)

    if toasts is not None:
        description = user_message or getattr(error, "user_message", None) or GENERIC_FAILURE
        toasts.error(title or "Error", description)


MAX_CONSECUTIVE_FAILURES = 5


def handle_critical_error(
    error: Exception,
    context: str,
    toasts: Optional["ToastLog"] = None,
    recovery_action: Optional[Callable[[], None]] = None,
    consecutive: int = 1,
) -> bool:
    """
    Handle an error that escaped a scene's update or draw.

    `recovery_action` usually rebuilds or reloads the failing scene. The
    loop keeps running when the error was recovered from or at least shown
    to the player, unless the same loop has now failed `consecutive` frames
    in a row and hit MAX_CONSECUTIVE_FAILURES.

    Returns:
        True if the frame loop may continue, False if it should re-raise
    """
    log_error(error, context)

    if consecutive >= MAX_CONSECUTIVE_FAILURES:
        logger.critical(f"{context} failed {consecutive} frames in a row, giving up")
        return False

    recovered = False
    if recovery_action is not None:
        try:
            recovery_action()
            recovered = True
            logger.info(f"{context} reset after {type(error).__name__}")
        except Exception as recovery_error:
            log_error(recovery_error, f"{context}.reset")

    if toasts is not None:
        if recovered:
            toasts.error("Screen reset", f"{context} hit an error and was reloaded.")
        else:
            toasts.error("Unexpected error", f"An error occurred in {context}. Check logs for details.")
        return True

    return recovered
