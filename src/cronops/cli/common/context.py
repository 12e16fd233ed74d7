"""Application context management for the CLI."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Callable

from cronops.cli.common.exits import die
from cronops.core.adapters.schedulerapi import SchedulerApiAdapter
from cronops.core.auth import get_client
from cronops.core.config import ConfigError, ConsoleConfig, load_config
from cronops.core.console import ConsoleController


@dataclass
class ConsoleAppContext:
    """Application context holding the resolved scheduler connection settings."""

    profile: str | None
    config: ConsoleConfig


def build_console_context(
    profile: str | None, *, host: str | None = None
) -> ConsoleAppContext:
    """Build and return the application context.

    Args:
        profile: Optional connection profile name.
        host: Optional scheduler URL overriding the profile.

    Returns:
        ConsoleAppContext: Application context with resolved settings.
    """
    try:
        config = load_config(profile, host=host)
    except ConfigError as exc:
        die(str(exc), code=1)
    return ConsoleAppContext(profile=profile, config=config)


@asynccontextmanager
async def open_controller(
    appctx: ConsoleAppContext,
    *,
    on_error: Callable[[str], None] | None = None,
) -> AsyncIterator[ConsoleController]:
    """Yield a controller wired to the scheduler API; closes client and controller on exit."""
    async with get_client(appctx.config) as client:
        async with ConsoleController(
            SchedulerApiAdapter(client), on_error=on_error
        ) as controller:
            yield controller
