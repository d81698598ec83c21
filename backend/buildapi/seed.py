"""
Build API — Seeding CLI
=========================

Operational commands for filling a store with sample data. Not used by the
server at runtime.

    build-api-seed seed          # five sample aggregates, one transaction
    build-api-seed add-example   # one "Crushed Stone" row, printed back

Both commands open the store from DATABASE_URL (or --database-url), create
the Aggregates table if it is missing, and close the store when done.
"""

import asyncio
import logging
from typing import Dict, List, Optional

import typer

from buildapi.config import settings
from buildapi.database import Database
from buildapi.exceptions import BuildApiError
from buildapi.schemas.aggregate import AggregatePayload
from buildapi.services.aggregate_store import AggregateStore

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="build-api-seed",
    help="Populate the aggregates store with sample records",
    no_args_is_help=True,
)

SAMPLE_AGGREGATES: List[Dict] = [
    {
        "name": "Sand (Fine)",
        "looseDensity": 1450,
        "compactedDensity": 1650,
        "category": "Fine Aggregate",
    },
    {
        "name": "Gravel (20mm)",
        "looseDensity": 1520,
        "compactedDensity": 1750,
        "category": "Coarse Aggregate",
    },
    {
        "name": "Recycled Concrete",
        "looseDensity": 1350,
        "compactedDensity": 1580,
        "category": "Recycled Material",
    },
    {
        "name": "Limestone (Crushed)",
        "looseDensity": 1400,
        "compactedDensity": 1700,
        "category": "Base Material",
    },
    {
        "name": "River Rock",
        "looseDensity": 1550,
        "compactedDensity": 1800,
        "category": "Decorative Aggregate",
    },
]

EXAMPLE_AGGREGATE: Dict = {
    "name": "Crushed Stone",
    "looseDensity": 1450,
    "compactedDensity": 1650,
    "category": "Base Material",
}


async def seed_samples(database: Database, samples: Optional[List[Dict]] = None) -> List[int]:
    """
    Insert the sample aggregates atomically.

    All rows go in one transaction: if any insert fails, none are kept.

    Returns:
        The ids assigned to the inserted rows, in sample order.
    """
    if samples is None:
        samples = SAMPLE_AGGREGATES
    records = [AggregatePayload.model_validate(s) for s in samples]
    async with database.session() as session:
        async with session.begin():
            ids = await AggregateStore(session).insert_many(records)
    logger.info("Sample data added successfully! (%d rows)", len(ids))
    return ids


async def add_example(database: Database) -> Dict:
    """Insert the example aggregate and return it as read back from the store."""
    record = AggregatePayload.model_validate(EXAMPLE_AGGREGATE)
    async with database.session() as session:
        store = AggregateStore(session)
        async with session.begin():
            new_id = await store.insert(record)
        logger.info("Example aggregate added with ID: %s", new_id)
        row = await store.get_by_id(new_id)
    return row.to_dict()


async def _run(database_url: str, action):
    database = Database(database_url)
    await database.connect()
    try:
        return await action(database)
    finally:
        await database.dispose()


def _database_url_option() -> str:
    return typer.Option(
        settings.database_url,
        "--database-url",
        help="Async SQLAlchemy URL of the store (defaults to DATABASE_URL)",
    )


@app.command("seed")
def seed_command(database_url: str = _database_url_option()):
    """Add the five sample aggregates in a single transaction."""
    typer.echo("Adding sample aggregates...")
    try:
        ids = asyncio.run(_run(database_url, seed_samples))
    except BuildApiError as e:
        typer.echo(f"Error seeding database: {e.message}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Sample data added successfully! ids: {', '.join(str(i) for i in ids)}")


@app.command("add-example")
def add_example_command(database_url: str = _database_url_option()):
    """Add one example aggregate and print the stored row."""
    try:
        row = asyncio.run(_run(database_url, add_example))
    except BuildApiError as e:
        typer.echo(f"Error inserting example aggregate: {e.message}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Example aggregate added with ID: {row['id']}")
    typer.echo("Added example aggregate:")
    for key, value in row.items():
        typer.echo(f"  {key}: {value}")


def main() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    app()


if __name__ == "__main__":
    main()
