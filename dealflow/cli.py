"""CLI tools for running deal jobs by hand."""

import json
from uuid import UUID

import click

from dealflow.db.session import SessionLocal
from dealflow.scheduler import configure_logging


@click.group()
def cli():
    """Dealflow CLI tools."""
    configure_logging()


@cli.command()
def scan_idle_deals():
    """
    Run the idle deal scan once.

    Example:
        dealflow scan-idle-deals
    """
    from dealflow.services import idle_deal_service

    with SessionLocal() as db:
        stats = idle_deal_service.process_idle_deals(db)

    click.echo(f"✓ Idle deals found: {stats['idle_deals_found']}")
    click.echo(f"  Notifications created: {stats['notifications_created']}")
    click.echo(f"  Tasks created: {stats['tasks_created']}")
    for error in stats["errors"]:
        click.echo(f"❌ Deal {error['deal_id']}: {error['error']}")


@cli.command()
def send_callback_reminders():
    """Run the callback reminder sweep once."""
    from dealflow.services import callback_reminder_service

    with SessionLocal() as db:
        stats = callback_reminder_service.process_callback_reminders(db)

    click.echo(f"✓ Reminders sent: {stats['processed']}")
    for error in stats["errors"]:
        click.echo(f"❌ Callback {error['callback_id']}: {error['error']}")


@cli.command()
def run_scheduler():
    """Run both periodic jobs on their configured cadences."""
    import asyncio

    from dealflow.scheduler import scheduler_loop

    asyncio.run(scheduler_loop())


@cli.command()
@click.argument("deal_id", type=click.UUID)
def timeline(deal_id: UUID):
    """Print a deal's timeline as JSON, newest first."""
    from dealflow.services import deal_service, timeline_service

    with SessionLocal() as db:
        if not deal_service.get_deal(db, deal_id):
            raise click.ClickException(f"Deal {deal_id} not found")
        events = timeline_service.build_timeline(db, deal_id)

    click.echo(json.dumps([e.model_dump(mode="json") for e in events], indent=2))


if __name__ == "__main__":
    cli()
