"""
Shared failure policy for Discord and storage I/O.

Every network call made by the pipeline goes through :func:`attempt`, which
turns the outcome into an :class:`IOResult` instead of raising:

- ``discord.NotFound`` becomes ``IOStatus.NOT_FOUND``. A missing channel,
  member or message is a normal "nothing to do" outcome and is only logged at
  DEBUG level.
- Transient failures (HTTP errors, rate limits, permissions, timeouts, socket
  errors) become ``IOStatus.FAILED`` and are logged as warnings.

Nothing is retried. Callers inspect the result and carry on.

:func:`isolated_listener` is the outermost guard: it wraps a cog listener so
an unexpected exception is logged with its traceback and never escapes into
other handlers.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

import discord

from logcord.util.logger import get_logger

logger = get_logger("io_guard")

T = TypeVar("T")

TRANSIENT_ERRORS = (
    discord.HTTPException,
    discord.ClientException,
    asyncio.TimeoutError,
    OSError,
)


class IOStatus(Enum):
    """Outcome classes of a guarded I/O call."""
    OK = "ok"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class IOResult(Generic[T]):
    """Result of a guarded I/O call."""

    status: IOStatus
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.status is IOStatus.OK

    @classmethod
    def success(cls, value: T) -> "IOResult[T]":
        return cls(IOStatus.OK, value=value)

    @classmethod
    def missing(cls) -> "IOResult[T]":
        return cls(IOStatus.NOT_FOUND)

    @classmethod
    def failure(cls, error: BaseException) -> "IOResult[T]":
        return cls(IOStatus.FAILED, error=error)


async def attempt(
    awaitable: Awaitable[T],
    *,
    description: str,
    log: logging.Logger = logger,
) -> IOResult[T]:
    """Await ``awaitable`` and classify its outcome.

    Args:
        awaitable: The pending Discord or storage call.
        description: Short human description used in log lines, e.g.
            ``"fetch channel 123"``.
        log: Logger of the calling component.

    Returns:
        IOResult carrying the awaited value on success.
    """
    try:
        value = await awaitable
    except discord.NotFound:
        log.debug("[IO] %s: not found", description)
        return IOResult.missing()
    except TRANSIENT_ERRORS as exc:
        log.warning("[IO] %s failed: %s", description, exc)
        return IOResult.failure(exc)
    return IOResult.success(value)


def isolated_listener(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[None]]:
    """Wrap an event handler so its failures stay inside the handler.

    Must be applied below ``commands.Cog.listener`` so py-cord registers the
    wrapped coroutine.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> None:
        try:
            await func(*args, **kwargs)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("[LISTENER] Unhandled error in %s", func.__qualname__)

    return wrapper
