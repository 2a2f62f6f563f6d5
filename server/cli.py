"""Click CLI: run the server, seed the shop, inspect rankings and progression."""

from __future__ import annotations

import asyncio
import logging

import click

from realm.errors import RealmError
from realm.progression import attribute_preview, experience_progress, level_from_experience
from realm.tables import CLASS_DESCRIPTIONS
from server import ranking
from server.config import settings
from server.shop import seed_shop_catalog
from server.store import close_store, init_store

RANKINGS = {
    "kills": ranking.rank_by_kills,
    "deaths": ranking.rank_by_deaths,
    "level": ranking.rank_by_level,
}


def _configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def _with_store(coro_fn, *args):
    await init_store(settings.db_path)
    try:
        return await coro_fn(*args)
    finally:
        await close_store()


@click.group()
@click.option("--db", "db_path", default=None, help="SQLite database path (overrides CRONICAS_DB_PATH).")
def cli(db_path: str | None) -> None:
    """Crônicas character service."""
    if db_path:
        settings.db_path = db_path
    _configure_logging()


@cli.command()
@click.option("--host", default=None, help="Bind address.")
@click.option("--port", default=None, type=int, help="Bind port.")
@click.option("--reload", is_flag=True, help="Reload on code changes.")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "server.app:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@cli.command("seed-shop")
@click.option("--stock", default=None, type=int, help="Starting stock for each seeded item.")
def seed_shop(stock: int | None) -> None:
    """Load the built-in shop catalog, skipping items already present."""
    try:
        created = asyncio.run(_with_store(seed_shop_catalog, stock))
    except RealmError as e:
        raise click.ClickException(str(e))
    click.echo(f"Seeded {created} shop item(s).")


@cli.command("ranking")
@click.option("--by", "order", type=click.Choice(sorted(RANKINGS)), default="kills", help="Leaderboard to show.")
@click.option("--limit", default=None, type=int, help="Number of entries.")
def show_ranking(order: str, limit: int | None) -> None:
    """Print a leaderboard."""
    try:
        entries = asyncio.run(_with_store(RANKINGS[order], limit))
    except RealmError as e:
        raise click.ClickException(str(e))
    if not entries:
        click.echo("No ranked players yet.")
        return
    for entry in entries:
        click.echo(
            f"{entry.rank:>3}. {entry.username:<20} {entry.char_class:<13} "
            f"Lv {entry.level:<3} kills {entry.creature_kills:<5} deaths {entry.deaths:<4} gold {entry.gold}"
        )


@cli.command()
@click.argument("experience", type=click.IntRange(min=0))
def level(experience: int) -> None:
    """Show the level reached at EXPERIENCE."""
    into, per_level = experience_progress(experience)
    click.echo(f"Level {level_from_experience(experience)} ({into}/{per_level} to next)")


@cli.command()
@click.argument("constitution", type=click.IntRange(1, 20))
@click.argument("intelligence", type=click.IntRange(1, 20))
def preview(constitution: int, intelligence: int) -> None:
    """Starting health and mana for a new character sheet."""
    result = attribute_preview(constitution, intelligence)
    click.echo(f"Health: {result.base_health}  Mana: {result.base_mana}")


@cli.command()
def classes() -> None:
    """List the playable classes."""
    for char_class, description in CLASS_DESCRIPTIONS.items():
        click.echo(f"{char_class.value:<13} {description}")


if __name__ == "__main__":
    cli()
