"""
Logging utilities for netbridge.

Thin helpers over the standard library logger that attach structured
context fields through ``extra=``.
"""

import logging
from typing import Any, Dict, Optional


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: int,
    msg: str,
    **kwargs: Any,
) -> None:
    """
    Log with structured context fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: Additional context fields (resource_url, operation_kind, etc.)

    Example:
        log_with_context(
            logger, logging.DEBUG, "Operation settled",
            operation_kind="get_string",
            outcome="success",
        )
    """
    logger.log(level, msg, extra=kwargs)


def log_exception(
    logger: logging.Logger,
    exc: BaseException,
    msg: str,
    level: int = logging.ERROR,
    include_traceback: bool = True,
    **kwargs: Any,
) -> None:
    """
    Log exception with context and optional traceback.

    Automatically extracts error_category from BridgeError subclasses.

    Args:
        logger: Logger instance
        exc: Exception to log
        msg: Context message
        level: Log level (default: ERROR)
        include_traceback: Include full traceback (default: True)
        **kwargs: Additional context fields
    """
    error_category = kwargs.get("error_category")
    if error_category is None and hasattr(exc, "category"):
        cat = exc.category
        error_category = cat.value if hasattr(cat, "value") else str(cat)
        kwargs["error_category"] = error_category

    error_msg = str(exc)
    if len(error_msg) > 500:
        error_msg = error_msg[:500] + "..."
    kwargs["error_message"] = error_msg

    if include_traceback:
        logger.log(level, msg, exc_info=exc, extra=kwargs)
    else:
        logger.log(level, msg, extra=kwargs)


def _extract_instance_context(obj: Any) -> Dict[str, Any]:
    """
    Extract loggable context from instance attributes.

    Args:
        obj: Object instance

    Returns:
        Dict with identifier fields
    """
    ctx: Dict[str, Any] = {}

    for attr in ["operation_kind", "resource_url"]:
        if hasattr(obj, attr):
            value = getattr(obj, attr)
            if value is not None:
                ctx[attr] = value.value if hasattr(value, "value") else str(value)

    return ctx


class LoggedClass:
    """
    Mixin providing logging infrastructure for classes.

    Provides:
    - self._logger: Logger instance
    - self._log(): Log with auto-extracted context
    - self._log_exception(): Exception logging with context

    Example:
        class StringFetchAdapter(TransportAdapter):
            def invoke(self, transport, resource_url):
                self._log(logging.DEBUG, "Starting fetch")
                ...
    """

    log_component: Optional[str] = None  # Optional logger name suffix

    def __init__(self, *args, **kwargs):
        logger_name = self.__class__.__module__
        if self.log_component:
            logger_name = f"{logger_name}.{self.log_component}"
        self._logger = get_logger(logger_name)
        super().__init__(*args, **kwargs)

    def _log(self, level: int, msg: str, **extra: Any) -> None:
        """
        Log with automatic context extraction from instance.

        Args:
            level: Log level
            msg: Log message
            **extra: Additional context fields
        """
        context = _extract_instance_context(self)
        context.update(extra)
        log_with_context(self._logger, level, msg, **context)

    def _log_exception(
        self,
        exc: BaseException,
        msg: str,
        level: int = logging.ERROR,
        **extra: Any,
    ) -> None:
        """
        Log exception with automatic context extraction from instance.

        Args:
            exc: Exception to log
            msg: Context message
            level: Log level (default: ERROR)
            **extra: Additional context fields
        """
        context = _extract_instance_context(self)
        context.update(extra)
        log_exception(self._logger, exc, msg, level=level, **context)
