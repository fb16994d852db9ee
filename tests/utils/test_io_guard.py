import asyncio
from unittest.mock import MagicMock

import discord
import pytest

from logcord.util import io_guard
from logcord.util.io_guard import IOStatus, attempt, isolated_listener


async def _value(value):
    return value


async def _raise(exc):
    raise exc


@pytest.mark.asyncio
async def test_attempt_success_carries_value():
    result = await attempt(_value(5), description="value")
    assert result.ok
    assert result.status is IOStatus.OK
    assert result.value == 5


@pytest.mark.asyncio
async def test_attempt_not_found_is_missing(http_errors):
    log = MagicMock()
    result = await attempt(_raise(http_errors.not_found()), description="fetch channel 1", log=log)
    assert result.status is IOStatus.NOT_FOUND
    assert not result.ok
    log.debug.assert_called_once()
    log.warning.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("make_error", [
    lambda errors: errors.forbidden(),
    lambda errors: asyncio.TimeoutError(),
    lambda errors: OSError("connection reset"),
    lambda errors: discord.ClientException("closed"),
])
async def test_attempt_transient_errors_fail(make_error, http_errors):
    error = make_error(http_errors)
    log = MagicMock()
    result = await attempt(_raise(error), description="send", log=log)
    log.warning.assert_called_once()
    assert result.status is IOStatus.FAILED
    assert result.error is error


@pytest.mark.asyncio
async def test_attempt_does_not_hide_programming_errors():
    with pytest.raises(TypeError):
        await attempt(_raise(TypeError("bug")), description="bug")


@pytest.mark.asyncio
async def test_isolated_listener_swallows_and_logs(monkeypatch):
    log = MagicMock()
    monkeypatch.setattr(io_guard, "logger", log)
    calls = []

    @isolated_listener
    async def handler(value):
        calls.append(value)
        raise RuntimeError("boom")

    await handler(3)

    assert calls == [3]
    assert handler.__name__ == "handler"
    log.exception.assert_called_once()


@pytest.mark.asyncio
async def test_isolated_listener_propagates_cancellation():
    @isolated_listener
    async def handler():
        raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        await handler()
