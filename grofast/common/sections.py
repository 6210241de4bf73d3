"""Concurrent read sections, one database session each.

An ``AsyncSession`` cannot run two statements at once, so every section
opens its own session from the factory.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)

Section = Callable[[AsyncSession], Awaitable[Any]]


async def gather_sections(
    factory: async_sessionmaker,
    sections: dict[str, Section],
) -> tuple[dict[str, Any], list[str]]:
    """Run every section concurrently and wait for all of them to settle.

    Returns ``(results, failed)``: a failed section maps to ``None`` in
    ``results`` and its name is listed in ``failed``.
    """

    async def _run(section: Section) -> Any:
        async with factory() as session:
            return await section(session)

    outcomes = await asyncio.gather(
        *(_run(section) for section in sections.values()),
        return_exceptions=True,
    )

    results: dict[str, Any] = {}
    failed: list[str] = []
    for name, outcome in zip(sections, outcomes):
        if isinstance(outcome, BaseException):
            logger.error("Section %s failed: %r", name, outcome)
            results[name] = None
            failed.append(name)
        else:
            results[name] = outcome
    return results, failed
