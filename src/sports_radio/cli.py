"""CLI entrypoint for sports-radio."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from sports_radio import config
from sports_radio.clients.fcc_client import FCCClient, FCCFetchError
from sports_radio.locator import (
    PERMISSION_DENIED,
    POSITION_UNAVAILABLE,
    TIMEOUT,
    LocatorContext,
    browse_all,
    lookup_by_location,
)
from sports_radio.models import GeoPoint, StationValidationError
from sports_radio.ranking import SORT_KEYS, SPORTS, SportFilters
from sports_radio.render import render_fallback_list, render_station_list
from sports_radio.stations import load_stations, review_path, write_stations

console = Console()
logger = logging.getLogger(__name__)

_ERROR_CODES = {
    "permission-denied": PERMISSION_DENIED,
    "unavailable": POSITION_UNAVAILABLE,
    "timeout": TIMEOUT,
}

_stations_option = click.option(
    "--stations", "stations_path", type=click.Path(path_type=Path), default=None,
    help="Stations data file (defaults to the bundled table).",
)
_cache_option = click.option(
    "--cache", "cache_path", type=click.Path(path_type=Path), default=config.FCC_CACHE_FILE,
    show_default=True, help="FCC data cache file.",
)


def _load(stations_path: Path | None):
    try:
        return load_stations(stations_path)
    except StationValidationError as exc:
        raise click.ClickException(str(exc)) from exc


def _sport_color(sport: str) -> str:
    return {"Football": "red", "Volleyball": "white", "Men's Basketball": "yellow"}.get(sport, "magenta")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
def cli(verbose: bool):
    """Nebraska sports radio: find the stations carrying the game near you."""
    config.configure_logging(verbose)


@cli.command()
@click.option("--lat", type=float, default=None, help="Your latitude (decimal degrees).")
@click.option("--lon", type=float, default=None, help="Your longitude (decimal degrees).")
@click.option("--error", "error_name", type=click.Choice(list(_ERROR_CODES)), default=None,
              help="Report a failed location lookup instead of a point.")
@click.option("--sport", "sports", multiple=True, type=click.Choice(SPORTS),
              help="Only these sports (repeatable). Default: all.")
@click.option("--threshold", default=50.0, show_default=True, help="Search radius in miles.")
@click.option("--fallback-count", default=5, show_default=True,
              help="Closest stations to show when none are inside the radius.")
@click.option("--limit", default=10, show_default=True, help="Max results to display.")
@click.option("--sort", "sort_key", default="distance", type=click.Choice(SORT_KEYS), show_default=True)
@click.option("--html", "as_html", is_flag=True, help="Print the HTML list instead of a table.")
@_stations_option
def nearest(lat, lon, error_name, sports, threshold, fallback_count, limit, sort_key, as_html, stations_path):
    """List stations closest to a location."""
    if (lat is None) != (lon is None):
        raise click.UsageError("--lat and --lon must be given together")

    stations = _load(stations_path)
    context = LocatorContext(
        filters=SportFilters.only(sports) if sports else SportFilters(),
        threshold_miles=threshold,
        fallback_count=fallback_count,
        limit=limit,
        sort_key=sort_key,
    )
    point = GeoPoint(lat, lon) if lat is not None else None
    if point is None and error_name is None:
        result = browse_all(context, stations)
    else:
        error_code = _ERROR_CODES.get(error_name) if point is None else None
        result = lookup_by_location(context, stations, point=point, error_code=error_code)

    if as_html:
        click.echo(render_station_list(result.results) if point else render_fallback_list(result.fallback))
        return

    console.print(result.message)
    if result.used_fallback:
        _print_fallback(result.fallback)
        return

    table = Table(title=f"Nearest Stations ({sort_key})")
    table.add_column("Dial", style="bold", width=8)
    table.add_column("Call")
    table.add_column("City")
    table.add_column("Miles", justify="right")
    table.add_column("Signal", justify="right")
    table.add_column("Sports")

    for r in result.results:
        table.add_row(
            r.dial,
            r.call_sign,
            f"{r.city}, {r.state or ''}",
            f"{r.distance:.2f}",
            f"{r.signal:.2f}" if r.signal else "-",
            ", ".join(f"[{_sport_color(s)}]{s}[/]" for s in r.unique_sports),
        )

    console.print(table)


def _print_fallback(stations) -> None:
    table = Table(title="Stations Around Nebraska")
    table.add_column("Dial", style="bold", width=8)
    table.add_column("Call")
    table.add_column("City")
    table.add_column("Sport")
    for s in stations:
        table.add_row(s.dial, s.call_sign, f"{s.city}, {s.state or ''}", f"[{_sport_color(s.sport)}]{s.sport}[/]")
    console.print(table)


@cli.command()
@_stations_option
def fallback(stations_path):
    """Show the sample list used when no location is available."""
    from sports_radio.ranking import fallback_stations
    _print_fallback(fallback_stations(_load(stations_path)))


@cli.command("fcc-fetch")
@click.option("--state", "states", multiple=True, default=config.FCC_STATES, show_default=True,
              help="State to fetch (repeatable).")
@click.option("--refresh", is_flag=True, help="Ignore an existing cache and re-fetch.")
@_cache_option
def fcc_fetch(states, refresh, cache_path):
    """Fetch AM/FM facility data for whole states from the FCC."""
    from sports_radio.maintenance import fetch_states, load_cache, save_cache

    if cache_path.exists() and not refresh:
        records = load_cache(cache_path)
        located = [r for r in records if r.has_location]
        click.echo(f"Loaded {len(records)} stations from cache {cache_path} (use --refresh to re-fetch)")
        click.echo(f"Stations with coordinates: {len(located)}")
        for r in located[:3]:
            click.echo(f"  {r.call_sign} {r.frequency:g}{r.format} - {r.city}: "
                       f"tower {r.latitude:.5f}, {r.longitude:.5f}, power {r.power} kW")
        return

    async def _run():
        async with FCCClient() as client:
            return await fetch_states(client, list(states))

    try:
        records = asyncio.run(_run())
    except FCCFetchError as exc:
        logger.error("FCC fetch aborted: %s", exc)
        raise click.ClickException(f"{exc}; re-run when the FCC site is reachable") from exc

    save_cache(cache_path, records)
    click.echo(f"Saved {len(records)} stations to {cache_path}")


@cli.command("fcc-lookup")
@click.argument("call_sign")
@click.option("--format", "service", type=click.Choice(["AM", "FM"]), default="AM", show_default=True)
@click.option("--radio-locator", "state", default=None, metavar="STATE",
              help="Query radio-locator.com for this state instead of the FCC.")
@_stations_option
def fcc_lookup(call_sign, service, state, stations_path):
    """Look up one station's tower location and power."""
    from sports_radio.geo import haversine_km
    from sports_radio.maintenance import lookup_call_sign, lookup_radio_locator

    async def _run():
        async with FCCClient() as client:
            if state:
                return await lookup_radio_locator(client, call_sign, state, service)
            return await lookup_call_sign(client, call_sign.upper(), service)

    try:
        record = asyncio.run(_run())
    except FCCFetchError as exc:
        raise click.ClickException(str(exc)) from exc

    if record is None or not record.has_location:
        click.echo(f"No FCC data found for {call_sign} {service}")
        return

    click.echo(f"Tower location: {record.latitude:.5f}, {record.longitude:.5f}")
    click.echo(f"Power: {record.power} kW")

    listed = [s for s in _load(stations_path)
              if s.call_sign == record.call_sign and s.format == service and s.has_location]
    if listed:
        s = listed[0]
        km = haversine_km(s.latitude, s.longitude, record.latitude, record.longitude)
        click.echo(f"Listed location: {s.latitude}, {s.longitude} ({s.city}), {km:.2f} km from tower")


@cli.command("fcc-update")
@_stations_option
@_cache_option
def fcc_update(stations_path, cache_path):
    """Merge cached FCC tower data into the station table (writes a review copy)."""
    from sports_radio.maintenance import load_cache, update_stations

    source = stations_path or config.STATIONS_FILE
    stations = _load(source)
    updated, report = update_stations(stations, load_cache(cache_path))
    out = write_stations(review_path(source, "updated"), updated)

    click.echo(report.summary())
    for label in report.unmatched[:5]:
        click.echo(f"  No match: {label}")
    click.echo(f"Created {out}; review it, then replace {source}")


@cli.command("fcc-fix")
@_stations_option
@_cache_option
def fcc_fix(stations_path, cache_path):
    """Fill in FM translators from their AM towers (writes a review copy)."""
    from sports_radio.maintenance import fix_unmatched, load_cache

    source = stations_path or config.STATIONS_FILE
    fixed, report = fix_unmatched(_load(source), load_cache(cache_path))
    out = write_stations(review_path(source, "fixed"), fixed)

    click.echo(report.summary())
    for label in report.not_fixed:
        click.echo(f"  Could not fix: {label}")
    click.echo(f"Created {out}; review it, then replace {source}")


@cli.command("web")
@click.option("--port", default=8501, help="Streamlit port.")
def web(port: int):
    """Launch the Streamlit station map."""
    import subprocess
    import sys
    subprocess.run([
        sys.executable, "-m", "streamlit", "run",
        str(Path(__file__).with_name("dashboard_web.py")),
        "--server.port", str(port),
        "--server.headless", "true",
    ])
