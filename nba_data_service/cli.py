"""
NBA data service — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (fetch, snapshot write, backfill, manifest dump).
  5. Report result to stdout.

Install and run::

    pip install -e .
    nba-data-service --help
    nba-data-service validate-config
    nba-data-service fetch-games --date 2024-01-15
    nba-data-service write-snapshot
    nba-data-service sync-snapshots --days 7 --future-days 3
    nba-data-service show-manifest
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="nba-data-service",
    help="NBA game ingestion from balldontlie with day-keyed snapshot storage.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from nba_data_service.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from nba_data_service.utils.logging import configure_logging
    configure_logging(config.logging)


def _build_provider(config, retry: bool):
    """Return the balldontlie client, wrapped in the retry policy when asked."""
    from nba_data_service.ingestion.balldontlie_client import BalldontlieClient
    from nba_data_service.ingestion.retry import RetryingProvider

    client = BalldontlieClient.from_config(config.balldontlie)
    if not retry:
        return client, client
    return client, RetryingProvider.from_config(client, config.retry)


def _build_writer(config, base_path: Optional[str]):
    from nba_data_service.snapshots.writer import PrunePolicy, SnapshotWriter

    return SnapshotWriter(
        base_path=base_path or config.snapshots.base_path,
        retention_days=config.snapshots.retention_days,
        prune_policy=PrunePolicy(config.snapshots.prune_policy),
    )


def _fetch_or_exit(provider, date: Optional[str], tz: Optional[str]):
    """Fetch games, turning upstream failures into a clean exit."""
    import httpx

    from nba_data_service.errors import ProviderError, RateLimitError

    try:
        return provider.fetch_games(date, tz)
    except RateLimitError as exc:
        typer.echo(
            f"[ERROR] Rate limited: {exc} "
            f"(retry after {exc.retry_after.total_seconds():.0f}s)",
            err=True,
        )
        raise typer.Exit(code=1)
    except (ProviderError, httpx.TransportError) as exc:
        typer.echo(f"[ERROR] Fetch failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _game_line(game) -> str:
    return (
        f"  {game.away_team.abbreviation:>3} {game.score.away:>3} @ "
        f"{game.home_team.abbreviation:<3} {game.score.home:>3}  "
        f"{game.status.value:<11} {game.id}"
    )


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  API base URL:     {config.balldontlie.base_url}")
    typer.echo(f"  API key set:      {bool(config.balldontlie.api_key)}")
    typer.echo(f"  Timezone:         {config.balldontlie.timezone}")
    typer.echo(f"  Max pages:        {config.balldontlie.max_pages}")
    typer.echo(f"  Snapshot root:    {config.snapshots.base_path}")
    typer.echo(f"  Retention days:   {config.snapshots.retention_days}")
    typer.echo(f"  Prune policy:     {config.snapshots.prune_policy}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        dumped = config.model_dump()
        if dumped["balldontlie"].get("api_key"):
            dumped["balldontlie"]["api_key"] = "***"
        typer.echo(json.dumps(dumped, indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("fetch-games")
def fetch_games(
    date: Optional[str] = typer.Option(
        None,
        "--date",
        "-d",
        help="Date to fetch (YYYY-MM-DD). Defaults to today in --tz.",
    ),
    tz: Optional[str] = typer.Option(
        None,
        "--tz",
        help="IANA timezone used to resolve today (default from config).",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the games as a snapshot JSON document.",
    ),
    retry: bool = typer.Option(
        True,
        "--retry/--no-retry",
        help="Wrap the client in the configured retry policy.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Fetch one day's games from balldontlie and print them."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    from nba_data_service.models.snapshot import GamesSnapshot

    client, provider = _build_provider(config, retry)
    with client:
        date_key = client.resolve_date(date, tz)
        games = _fetch_or_exit(provider, date_key, tz)

    if as_json:
        typer.echo(GamesSnapshot(date=date_key, games=games).to_json())
        return

    typer.echo(f"Games for {date_key}: {len(games)}")
    for game in games:
        typer.echo(_game_line(game))
    typer.echo("")
    typer.echo(f"[OK] Fetched {len(games)} game(s).")


@app.command("write-snapshot")
def write_snapshot(
    date: Optional[str] = typer.Option(
        None,
        "--date",
        "-d",
        help="Date to fetch and persist (YYYY-MM-DD). Defaults to today in --tz.",
    ),
    tz: Optional[str] = typer.Option(
        None,
        "--tz",
        help="IANA timezone used to resolve today (default from config).",
    ),
    base_path: Optional[str] = typer.Option(
        None,
        "--base-path",
        help="Override snapshot root from config.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Fetch one day's games and write them as a snapshot.

    Refreshes the manifest and prunes snapshots outside the retention window.
    """
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    from nba_data_service.errors import InputValidationError
    from nba_data_service.models.snapshot import GamesSnapshot
    from nba_data_service.snapshots.paths import check_date_key

    writer = _build_writer(config, base_path)
    client, provider = _build_provider(config, retry=True)
    with client:
        date_key = client.resolve_date(date, tz)
        try:
            check_date_key(date_key)
        except InputValidationError as exc:
            typer.echo(f"[ERROR] {exc}", err=True)
            raise typer.Exit(code=1)
        games = _fetch_or_exit(provider, date_key, tz)

    try:
        result = writer.write_games_snapshot(date_key, GamesSnapshot(date=date_key, games=games))
    except OSError as exc:
        typer.echo(f"[ERROR] Snapshot write failed: {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Snapshot:  {result.path}")
    typer.echo(f"Games:     {len(games)}")
    typer.echo(f"Changed:   {result.changed}")
    typer.echo(f"Retained:  {len(result.retained_dates)} date(s)")
    if result.pruned_dates:
        typer.echo(f"Pruned:    {', '.join(result.pruned_dates)}")
    typer.echo("")
    typer.echo(f"[OK] Snapshot written for {date_key}.")


@app.command("sync-snapshots")
def sync_snapshots(
    days: Optional[int] = typer.Option(
        None,
        "--days",
        help="Past window in days, counting today (default from config).",
    ),
    future_days: Optional[int] = typer.Option(
        None,
        "--future-days",
        help="Days ahead to prefetch when missing (default from config).",
    ),
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        help="Seconds to pause between dates (default from config).",
    ),
    base_path: Optional[str] = typer.Option(
        None,
        "--base-path",
        help="Override snapshot root from config.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Run one backfill pass over the configured date window.

    Today and yesterday are always refetched; other dates only when missing.
    Exits with code 1 if any date failed.
    """
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    from nba_data_service.snapshots.sync import SnapshotSyncer

    writer = _build_writer(config, base_path)
    client, provider = _build_provider(config, retry=True)
    syncer = SnapshotSyncer(
        provider=provider,
        writer=writer,
        days=days if days is not None else config.snapshots.sync_days,
        future_days=future_days if future_days is not None else config.snapshots.future_days,
        interval=interval if interval is not None else config.snapshots.sync_interval_seconds,
    )

    with client:
        report = syncer.sync()

    typer.echo(f"Dates attempted: {len(report.dates)}")
    typer.echo(f"Written:         {len(report.written)}")
    typer.echo(f"Empty:           {len(report.empty)}")
    typer.echo(f"Failed:          {len(report.failed)}")
    for date_key, error in report.failed.items():
        typer.echo(f"  [FAIL] {date_key}: {error}")

    if not report.ok:
        typer.echo("")
        typer.echo("[ERROR] Sync finished with failures.", err=True)
        raise typer.Exit(code=1)

    typer.echo("")
    typer.echo("[OK] Sync complete.")


@app.command("show-manifest")
def show_manifest(
    base_path: Optional[str] = typer.Option(
        None,
        "--base-path",
        help="Override snapshot root from config.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Print the snapshot manifest for the configured storage root."""
    config = _load_config_or_exit(config_path)

    from nba_data_service.snapshots.manifest import ManifestStatus, load_manifest
    from nba_data_service.snapshots.paths import manifest_path

    root = base_path or config.snapshots.base_path
    load = load_manifest(manifest_path(root), config.snapshots.retention_days)

    if load.status is ManifestStatus.MISSING:
        typer.echo(f"[WARN] No manifest at {manifest_path(root)}; showing defaults.")
    elif load.status is ManifestStatus.CORRUPT:
        typer.echo(f"[WARN] Manifest unreadable ({load.error}); showing defaults.")

    typer.echo(load.manifest.to_json())


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
