"""Shared click options and helpers for jdkscout commands."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

import click
from rich.console import Console
from rich.logging import RichHandler

from jdkscout.config import DetectConfig

_F = Callable[..., Any]


def detection_options(func: _F) -> _F:
    """Attach the options every detection command accepts."""
    decorators = [
        click.option(
            "--path", "paths", multiple=True,
            help="Additional directory to search (repeatable).",
        ),
        click.option(
            "--force", is_flag=True, default=False,
            help="Ignore cached results and rescan.",
        ),
        click.option(
            "--ignore-platform-paths", is_flag=True, default=False,
            help="Skip well-known OS installation locations.",
        ),
        click.option(
            "--java-home", default=None,
            help="Java home to check instead of JAVA_HOME.",
        ),
        click.option(
            "--format", "output_format",
            type=click.Choice(["text", "json"]),
            default="text",
            help="Output format (default: text).",
        ),
        click.option(
            "--verbose", "-v", is_flag=True, default=False,
            help="Log detection progress to stderr.",
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def build_config(
    paths: tuple[str, ...],
    force: bool,
    ignore_platform_paths: bool,
    java_home: str | None,
) -> DetectConfig:
    return DetectConfig(
        force=force,
        paths=list(paths),
        ignore_platform_paths=ignore_platform_paths,
        java_home=java_home,
    )


def configure_logging(verbose: bool) -> None:
    """Route jdkscout logs to stderr through Rich when *verbose*."""
    if not verbose:
        return
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    logger = logging.getLogger("jdkscout")
    logger.setLevel(logging.DEBUG)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(handler)


def run_async(coro: object) -> object:
    """Run an async coroutine in a synchronous context.

    Args:
        coro: Awaitable coroutine to execute.

    Returns:
        The coroutine's return value.
    """
    return asyncio.run(coro)  # type: ignore[arg-type]
