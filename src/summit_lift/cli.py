"""CLI entry point for summit-lift."""

import logging
from pathlib import Path

import click

from . import __version__
from .commands import bodyweight, init, plans, pro, session, stats, units


@click.group()
@click.version_option(version=__version__, prog_name="summit-lift")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="SUMMIT_LIFT_DATA_DIR",
    help="Directory holding the summit-lift database.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output.")
@click.pass_context
def main(ctx: click.Context, data_dir: Path | None, verbose: bool):
    """summit-lift: workout plans, sessions and progression tracking.

    Plan workouts, run them in rotation with weights suggested from your
    history, and follow your estimated strength over time.

    Example usage:

        # Create the database with a sample plan and history
        summit-lift init

        # Start the next workout of the active plan
        summit-lift session start

        # Log 8 reps on the first set of the first exercise
        summit-lift session log 1 1 8

        # Finish it
        summit-lift session complete
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = data_dir


# Register commands
main.add_command(init)
main.add_command(plans)
main.add_command(session)
main.add_command(stats)
main.add_command(bodyweight)
main.add_command(units)
main.add_command(pro)


def run():
    """Run the CLI (handles async event loop)."""
    main()


if __name__ == "__main__":
    run()
