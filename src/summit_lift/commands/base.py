"""Shared CLI utilities."""

import asyncio
import logging
from collections.abc import Callable, Iterable
from functools import wraps
from pathlib import Path
from typing import TypeVar

import click
from questionary import Style

from ..db import SettingsRepository, get_db_path
from ..errors import NotFoundError, SummitLiftError, ValidationError
from ..models.units import WeightUnit

logger = logging.getLogger(__name__)

T = TypeVar("T")

SHORT_ID_LENGTH = 8


def async_command(f):
    """Decorator to run async Click commands.

    Domain errors are reported on the terminal and turn into exit code 1.
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return asyncio.run(f(*args, **kwargs))
        except ValidationError as e:
            for problem in e.problems:
                echo_error(problem)
            raise click.exceptions.Exit(1)
        except SummitLiftError as e:
            logger.debug("Command failed", exc_info=True)
            echo_error(str(e))
            raise click.exceptions.Exit(1)

    return wrapper


def get_data_dir(ctx: click.Context) -> Path | None:
    """Data directory chosen on the root command, if any."""
    root = ctx.find_root()
    if root.obj is None:
        return None
    return root.obj.get("data_dir")


def db_path_for(ctx: click.Context) -> Path:
    """Database file for this invocation."""
    return get_db_path(get_data_dir(ctx))


def ensure_initialized(ctx: click.Context) -> None:
    """Ensure the database is initialized."""
    if not db_path_for(ctx).exists():
        click.echo(
            click.style("Error: ", fg="red")
            + "Project not initialized. Run 'summit-lift init' first."
        )
        ctx.exit(1)


async def get_unit(ctx: click.Context) -> WeightUnit:
    return await SettingsRepository(db_path_for(ctx)).get_weight_unit()


def short_id(identifier: str) -> str:
    return identifier[:SHORT_ID_LENGTH]


def match_ref(items: Iterable[T], ref: str, kind: str, name: Callable[[T], str]) -> T:
    """Pick an item by full id, unique id prefix, or case-insensitive name."""
    items = list(items)
    for item in items:
        if item.id == ref:
            return item

    by_prefix = [item for item in items if item.id.startswith(ref)]
    if len(by_prefix) == 1:
        return by_prefix[0]

    wanted = ref.strip().casefold()
    by_name = [item for item in items if name(item).casefold() == wanted]
    if len(by_name) == 1:
        return by_name[0]
    if len(by_prefix) > 1 or len(by_name) > 1:
        raise ValidationError([f"{kind} {ref!r} is ambiguous; use a longer id"])
    raise NotFoundError(kind, ref)


def parse_rep_range(value: str) -> tuple[str, str]:
    """Split ``"8-12"`` into its bounds; ``"5"`` means exactly five."""
    low, _, high = value.partition("-")
    return low.strip(), (high or low).strip()


def echo_success(message: str) -> None:
    """Print a success message."""
    click.echo(click.style("[OK] ", fg="green") + message)


def echo_error(message: str) -> None:
    """Print an error message."""
    click.echo(click.style("[ERROR] ", fg="red") + message)


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(click.style("[INFO] ", fg="blue") + message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.echo(click.style("[WARN] ", fg="yellow") + message)


def format_table(headers: list[str], rows: list[list[str]], padding: int = 2) -> str:
    """Format data as a simple table."""
    if not rows:
        return ""

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    lines = ["".join(h.ljust(widths[i] + padding) for i, h in enumerate(headers)).rstrip()]
    lines.append("".join("-" * w + " " * padding for w in widths).rstrip())
    for row in rows:
        lines.append(
            "".join(str(cell).ljust(widths[i] + padding) for i, cell in enumerate(row)).rstrip()
        )
    return "\n".join(lines)


# Style for interactive prompts
prompt_style = Style(
    [
        ("qmark", "fg:#2e7d32 bold"),
        ("question", "bold"),
        ("answer", "fg:#f9a825 bold"),
        ("pointer", "fg:#2e7d32 bold"),
        ("highlighted", "fg:#2e7d32 bold"),
        ("selected", "fg:#cc5454"),
        ("separator", "fg:#cc5454"),
        ("instruction", ""),
        ("text", ""),
    ]
)
