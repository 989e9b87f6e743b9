"""Bounded collaborator calls."""

import asyncio
from typing import Awaitable, TypeVar

from src.allocation.errors import TransientCollaboratorError

T = TypeVar("T")


async def bounded_call(
    awaitable: Awaitable[T],
    timeout: float,
    error_cls: type[TransientCollaboratorError],
    description: str,
) -> T:
    """Await a collaborator call, mapping timeouts and connection loss to ``error_cls``.

    Typed allocation errors raised by the collaborator pass through untouched.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError:
        raise error_cls(f"Timed out after {timeout}s {description}") from None
    except ConnectionError as exc:
        raise error_cls(f"Connection lost {description}: {exc}") from exc
