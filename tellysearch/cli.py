"""Command-line interface for inspecting and maintaining the detail cache."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click
from pydantic import BaseModel

from .cache.registry import DetailCaches, build_detail_caches
from .common.keys import DetailKind, movie_key, person_key, season_key, show_key
from .config import Settings
from .errors import InvalidKeyError, NetworkFetchError
from .service import DetailService
from .tmdb import TMDbClient, create_http_client


def _build_caches(settings: Settings) -> DetailCaches:
    return build_detail_caches(
        settings.disk_cache_dir,
        ttl=settings.cache_ttl_seconds,
        count_limit=settings.cache_count_limit,
    )


def _key_for(kind: DetailKind, detail_id: int, season: int | None) -> str:
    if kind is DetailKind.SEASON:
        if season is None:
            raise click.UsageError("--season is required for season details")
        return season_key(detail_id, season)
    if kind is DetailKind.SHOW:
        return show_key(detail_id)
    if kind is DetailKind.MOVIE:
        return movie_key(detail_id)
    return person_key(detail_id)


async def _resolve(settings: Settings, key: str) -> BaseModel:
    caches = _build_caches(settings)
    async with create_http_client(settings) as http_client:
        client = TMDbClient.from_settings(http_client, settings)
        service = DetailService(caches, client)
        return await service.resolve(key)


@click.group()
@click.option(
    "--cache-dir",
    envvar="CACHE_DIR",
    show_envvar=True,
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory holding the disk cache namespaces",
)
@click.option(
    "--ttl",
    "ttl_seconds",
    envvar="CACHE_TTL_SECONDS",
    show_envvar=True,
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds a cached detail stays valid",
)
@click.option(
    "--count-limit",
    envvar="CACHE_COUNT_LIMIT",
    show_envvar=True,
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of details kept in memory per kind",
)
@click.option(
    "--no-disk",
    is_flag=True,
    default=False,
    help="Run with the memory tier only",
)
@click.option(
    "--log-level",
    envvar="LOG_LEVEL",
    show_envvar=True,
    type=click.Choice(
        ["critical", "error", "warning", "info", "debug", "notset"],
        case_sensitive=False,
    ),
    default="warning",
    show_default=True,
    help="Logging level for console output",
)
@click.pass_context
def main(
    ctx: click.Context,
    cache_dir: Path | None,
    ttl_seconds: float | None,
    count_limit: int | None,
    no_disk: bool,
    log_level: str,
) -> None:
    """Entry-point for the ``tellysearch`` script."""

    logging.basicConfig(level=getattr(logging, log_level.upper(), logging.INFO))

    settings = Settings()
    overrides: dict[str, object] = {}
    if cache_dir is not None:
        overrides["cache_dir"] = cache_dir.expanduser()
    if ttl_seconds is not None:
        overrides["cache_ttl_seconds"] = ttl_seconds
    if count_limit is not None:
        overrides["cache_count_limit"] = count_limit
    if no_disk:
        overrides["cache_disk_enabled"] = False
    ctx.obj = settings.model_copy(update=overrides) if overrides else settings


@main.command()
@click.argument(
    "kind", type=click.Choice([kind.value for kind in DetailKind], case_sensitive=False)
)
@click.argument("detail_id", type=click.IntRange(min=1))
@click.option("--season", type=click.IntRange(min=0), help="Season number for season details")
@click.option(
    "--tmdb-api-key",
    envvar="TMDB_API_KEY",
    show_envvar=True,
    required=True,
    help="TMDb API read access token",
)
@click.pass_obj
def fetch(
    settings: Settings,
    kind: str,
    detail_id: int,
    season: int | None,
    tmdb_api_key: str,
) -> None:
    """Resolve a detail through the cache and print it as JSON."""

    key = _key_for(DetailKind(kind.lower()), detail_id, season)
    settings = settings.model_copy(update={"tmdb_api_key": tmdb_api_key})
    try:
        detail = asyncio.run(_resolve(settings, key))
    except NetworkFetchError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(detail.model_dump_json(indent=2))


@main.command()
@click.argument("key")
@click.pass_obj
def invalidate(settings: Settings, key: str) -> None:
    """Remove KEY from the memory and disk tiers."""

    caches = _build_caches(settings)
    try:
        caches.for_key(key).invalidate(key)
    except InvalidKeyError as exc:
        raise click.BadParameter(exc.reason, param_hint="KEY") from exc
    click.echo(f"Invalidated {key}")


@main.command()
@click.pass_obj
def purge(settings: Settings) -> None:
    """Delete expired and corrupt records from the disk cache."""

    removed = _build_caches(settings).purge_expired()
    click.echo(f"Purged {removed} expired record(s)")


@main.command()
@click.confirmation_option(prompt="Remove every cached detail?")
@click.pass_obj
def clear(settings: Settings) -> None:
    """Remove every cached detail of every kind."""

    removed = _build_caches(settings).clear()
    click.echo(f"Removed {removed} record(s)")


@main.command()
@click.argument(
    "kind",
    required=False,
    type=click.Choice([kind.value for kind in DetailKind], case_sensitive=False),
)
@click.pass_obj
def keys(settings: Settings, kind: str | None) -> None:
    """List unexpired keys stored on disk."""

    caches = _build_caches(settings)
    selected = [caches.for_kind(DetailKind(kind.lower()))] if kind else list(caches)
    for cache in selected:
        if cache.disk is None:
            click.echo(f"# {cache.kind.namespace}: disk tier unavailable", err=True)
            continue
        for key in cache.disk.keys():
            click.echo(key)


if __name__ == "__main__":
    main()
