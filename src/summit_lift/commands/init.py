"""Initialize project command."""

import click

from ..db import init_db
from ..services import SeedGenerator
from .base import async_command, db_path_for, echo_info, echo_success


@click.command()
@click.option("--no-seed", is_flag=True, help="Do not create the sample plan and history.")
@click.pass_context
@async_command
async def init(ctx: click.Context, no_seed: bool):
    """Initialize the summit-lift database.

    On an empty database this also creates a sample push/pull/legs plan with
    about eight weeks of history so progress charts have something to show.
    """
    db_path = db_path_for(ctx)
    echo_info(f"Initializing summit-lift in {db_path.parent}")

    await init_db(db_path)
    echo_success("Database initialized")

    if not no_seed:
        if await SeedGenerator(db_path).seed_if_needed():
            echo_success("Sample plan and history created")
        else:
            echo_info("Existing plans found, sample data skipped")

    click.echo()
    click.echo("summit-lift is ready to use!")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Look at your plans:")
    click.echo("     summit-lift plans list")
    click.echo()
    click.echo("  2. Start the next workout:")
    click.echo("     summit-lift session start")
