from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol, Union

from .context import bind as bind_ctx
from .levels import LogLevel


class SupportsStr(Protocol):
    def __str__(self) -> str: ...


Message = Union[SupportsStr, Callable[[], SupportsStr]]


class StructuredLogger:
    """Thin wrapper over ``logging.Logger`` with lazy messages and a service tag.

    Messages may be callables; they are only evaluated when the level is
    enabled, so probe hot paths pay nothing when logging is quiet.
    """

    def __init__(self, logger: logging.Logger, service: Optional[str] = None) -> None:
        self._logger = logger
        self._service = service

    @property
    def name(self) -> str:
        return self._logger.name

    def bind(self, **values: Any) -> "StructuredLogger":
        bind_ctx(**values)
        return self

    def _log(self, level: int, msg: Message, **kwargs: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        message = msg() if callable(msg) else msg
        extra = dict(kwargs.pop("extra", None) or {})
        if self._service:
            extra.setdefault("service", self._service)
        self._logger.log(level, "%s", message, extra=extra, **kwargs)

    def trace(self, msg: Message, **kwargs: Any) -> None:
        self._log(int(LogLevel.TRACE), msg, **kwargs)

    def debug(self, msg: Message, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, **kwargs)

    def info(self, msg: Message, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, **kwargs)

    def success(self, msg: Message, **kwargs: Any) -> None:
        self._log(int(LogLevel.SUCCESS), msg, **kwargs)

    def warning(self, msg: Message, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, **kwargs)

    def error(self, msg: Message, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, **kwargs)


def get_logger(name: str, *, service: Optional[str] = None) -> StructuredLogger:
    return StructuredLogger(logging.getLogger(name), service=service)
