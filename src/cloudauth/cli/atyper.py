"""Typer subclass that accepts ``async def`` commands."""

import asyncio
import inspect
from functools import wraps
from typing import Any, Callable

import typer


def run_sync(f: Callable) -> Callable:
    """Wrap a coroutine function so click can call it synchronously."""

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return asyncio.run(_run_and_cleanup(f(*args, **kwargs)))

    return wrapper


async def _run_and_cleanup(coro: Any) -> Any:
    from cloudauth.core.http import cleanup

    try:
        return await coro
    finally:
        # The shared client is bound to this event loop
        await cleanup()


class ATyper(typer.Typer):
    """Typer with async command support.

    Each async command runs in its own event loop via ``asyncio.run``.
    """

    def command(self, name: str | None = None, **kwargs: Any) -> Any:  # type: ignore[override]
        register = super().command(name, **kwargs)

        def decorator(f: Callable) -> Callable:
            if inspect.iscoroutinefunction(f):
                register(run_sync(f))
                return f
            return register(f)

        return decorator
