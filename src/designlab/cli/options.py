"""Shared click options."""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

import click


def config_options[F: Callable[..., Any]](func: F) -> F:
    """
    Decorator adding configuration lookup options to a click command.

    Options added:
        --project-dir: Project root holding .designlab/
        --config: Explicit config file instead of the project one
        --no-user-config: Skip the user-level config
    """

    @click.option(
        "--project-dir",
        default=".",
        show_default=True,
        type=click.Path(file_okay=False),
        help="Project root holding .designlab/",
    )
    @click.option(
        "--config",
        "config_file",
        default=None,
        type=click.Path(exists=True, dir_okay=False),
        help="Config file to use instead of .designlab/design-lab.json(c)",
    )
    @click.option(
        "--no-user-config",
        is_flag=True,
        help="Ignore the user-level config under ~/.config/design-lab",
    )
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]
