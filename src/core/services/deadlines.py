"""Caller-supplied deadlines for transactional stages."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from src.core.exceptions import DeadlineExceededError


@asynccontextmanager
async def deadline_scope(operation: str, deadline: float | None) -> AsyncIterator[None]:
    """
    Bound the enclosed block to `deadline` seconds.

    On expiry the block is cancelled (which rolls back an open unit of work)
    and DeadlineExceededError is raised. `None` means no deadline.
    """
    if deadline is None:
        yield
        return

    try:
        async with asyncio.timeout(deadline):
            yield
    except TimeoutError as e:
        raise DeadlineExceededError(operation, deadline) from e
