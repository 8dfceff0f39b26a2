"""femtologging wiring for Folio.

Every module obtains its logger through :func:`get_logger` and emits
messages through the ``log_*`` helpers below.  The helpers interpolate
percent-style templates before handing the text to femtologging, whose
loggers accept only pre-formatted strings.

Example:
>>> from folio.logging import get_logger, log_info
>>> logger = get_logger(__name__)
>>> log_info(logger, "Registered content %s", "1")

"""

from __future__ import annotations

import enum
import typing as typ

from femtologging import basicConfig, get_logger


class LogLevel(enum.StrEnum):
    """Level names accepted by ``FOLIO_LOG_LEVEL``."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


_DEFAULT_LEVEL = LogLevel.INFO.value


def normalize_log_level(level: str | None) -> tuple[str, bool]:
    """Return the canonical level name and whether the input was rejected.

    Parameters
    ----------
    level : str | None
        Level name as supplied by the operator, in any case.

    Returns
    -------
    tuple[str, bool]
        ``(name, invalid)`` where ``invalid`` is ``True`` when ``level`` was
        empty or unknown and ``INFO`` was substituted.

    """
    candidate = (level or "").strip().upper()
    if candidate in LogLevel.__members__:
        return (candidate, False)
    return (_DEFAULT_LEVEL, True)


def configure_logging(level: str, *, force: bool = False) -> tuple[str, bool]:
    """Install the femtologging root handler at ``level``.

    Parameters
    ----------
    level : str
        Level name to normalise before configuring.
    force : bool, optional
        Replace an existing handler configuration.

    Returns
    -------
    tuple[str, bool]
        Result of :func:`normalize_log_level` for ``level``.

    """
    normalized, invalid = normalize_log_level(level)
    basicConfig(level=normalized, force=force)
    return (normalized, invalid)


def format_log_message(template: str, *args: object) -> str:
    """Interpolate ``args`` into a percent-style ``template``."""
    if not args:
        return template
    return template % args


class _SupportsLog(typ.Protocol):
    """Subset of the femtologging logger interface used by Folio."""

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str | None: ...


def _emit(
    logger: _SupportsLog,
    level: LogLevel,
    template: str,
    args: tuple[object, ...],
    exc_info: object | None,
) -> None:
    logger.log(
        level.value,
        format_log_message(template, *args),
        exc_info=exc_info,
        stack_info=False,
    )


def log_debug(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Emit a DEBUG record built from ``template`` and ``args``."""
    _emit(logger, LogLevel.DEBUG, template, args, exc_info)


def log_info(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Emit an INFO record built from ``template`` and ``args``.

    Parameters
    ----------
    logger : _SupportsLog
        Destination logger.
    template : str
        Percent-style message template.
    *args : object
        Values substituted into ``template``.
    exc_info : object | None, optional
        Exception details forwarded to femtologging.

    """
    _emit(logger, LogLevel.INFO, template, args, exc_info)


def log_warning(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Emit a WARNING record built from ``template`` and ``args``."""
    _emit(logger, LogLevel.WARNING, template, args, exc_info)


def log_error(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Emit an ERROR record built from ``template`` and ``args``."""
    _emit(logger, LogLevel.ERROR, template, args, exc_info)


def log_exception(logger: _SupportsLog, message: str, exc: BaseException) -> None:
    """Emit an ERROR record carrying ``exc`` as its exception payload.

    Parameters
    ----------
    logger : _SupportsLog
        Destination logger.
    message : str
        Already formatted description of the failure.
    exc : BaseException
        The exception attached as ``exc_info``.

    """
    logger.log(LogLevel.ERROR.value, message, exc_info=exc, stack_info=False)


__all__ = [
    "LogLevel",
    "configure_logging",
    "format_log_message",
    "get_logger",
    "log_debug",
    "log_error",
    "log_exception",
    "log_info",
    "log_warning",
    "normalize_log_level",
]
