"""
Command-line interface for the application.

This module provides the main entry point for the CLI. Every command builds
its stores from the current settings, so the same commands work against the
hosted datastore or the local fallback.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import TYPE_CHECKING

from pydantic import ValidationError

from kikk import __version__
from kikk.analysis import recent_species, unexported_observations
from kikk.config import get_settings
from kikk.datasources.nominatim import reverse_geocode
from kikk.datasources.supabase import RemoteStoreError
from kikk.preferences import Preferences
from kikk.reference import tile_url
from kikk.schemas import LatLng, UserLocationCreate
from kikk.search import SpeciesSearch
from kikk.store import KeyValueStore
from kikk.stores import Stores, build_stores

if TYPE_CHECKING:
    from kikk.schemas import Observation, UserLocation


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="kikk",
        description="Field log for species observations",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--user",
        default=None,
        help="User id for hosted data (default: anonymous)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info and storage mode")

    # 'locations' command - saved locations
    locations_parser = subparsers.add_parser("locations", help="Manage saved locations")
    locations_sub = locations_parser.add_subparsers(dest="action")
    locations_sub.add_parser("list", help="List saved locations")
    add_parser = locations_sub.add_parser("add", help="Save a location")
    add_parser.add_argument("name", help="Location name")
    add_parser.add_argument("lat", type=float, help="Latitude")
    add_parser.add_argument("lng", type=float, help="Longitude")
    add_parser.add_argument(
        "--radius",
        type=float,
        default=10.0,
        help="Uncertainty radius in meters (default: 10)",
    )
    add_parser.add_argument("--description", default=None, help="Free-text description")
    delete_parser = locations_sub.add_parser("delete", help="Delete a saved location")
    delete_parser.add_argument("id", help="Location id")

    # 'observations' command
    observations_parser = subparsers.add_parser("observations", help="List observations")
    observations_parser.add_argument(
        "--new",
        action="store_true",
        help="Only observations that have never been exported",
    )
    observations_parser.add_argument(
        "--recent",
        action="store_true",
        help="List the most recently observed species instead",
    )

    # 'search' command - taxonomy lookup
    search_parser = subparsers.add_parser("search", help="Search species by name")
    search_parser.add_argument("term", help="Vernacular or scientific name")
    search_parser.add_argument(
        "--group",
        type=int,
        default=None,
        help="Restrict to an Artsdatabanken taxon group id",
    )

    # 'geocode' command
    geocode_parser = subparsers.add_parser("geocode", help="Name the place at a point")
    geocode_parser.add_argument("lat", type=float, help="Latitude")
    geocode_parser.add_argument("lng", type=float, help="Longitude")

    # 'export' command - write a spreadsheet
    export_parser = subparsers.add_parser("export", help="Export observations to xlsx")
    export_parser.add_argument(
        "--new",
        action="store_true",
        help="Only observations that have never been exported",
    )
    export_parser.add_argument(
        "--no-storage",
        action="store_true",
        help="Keep the file local; do not upload or log the export",
    )

    # 'exports' command - export history
    exports_parser = subparsers.add_parser("exports", help="Show or download past exports")
    exports_sub = exports_parser.add_subparsers(dest="action")
    exports_sub.add_parser("list", help="List past exports")
    download_parser = exports_sub.add_parser("download", help="Download a past export")
    download_parser.add_argument("path", help="Storage path from 'exports list'")

    # 'layer' and 'theme' commands - preferences
    layer_parser = subparsers.add_parser("layer", help="Show or set the map base layer")
    layer_parser.add_argument("value", nargs="?", choices=["topo", "satellite"])
    theme_parser = subparsers.add_parser("theme", help="Show or set the colour theme")
    theme_parser.add_argument("value", nargs="?", choices=["light", "dark", "system"])

    return parser


def _stores(args: argparse.Namespace) -> Stores:
    return build_stores(get_settings(), user_id=args.user)


def _format_location(loc: UserLocation) -> str:
    return (
        f"{loc.id}  {loc.name}  ({loc.location.lat:.5f}, {loc.location.lng:.5f})"
        f"  ±{loc.uncertainty_radius:g} m"
    )


def _format_observation(obs: Observation) -> str:
    when = obs.start_date.strftime("%Y-%m-%d %H:%M") if obs.start_date else "undated"
    names = ", ".join(
        f"{s.species.preferred_popular_name or s.species.valid_scientific_name} x{s.count}"
        for s in obs.species_observations
    )
    marker = "" if obs.last_exported_at else "  [new]"
    return f"{obs.id}  {when}  {obs.location_name or '-'}: {names}{marker}"


def cmd_info(args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Storage: {'hosted datastore' if settings.remote_configured else 'local'}")
    if not settings.remote_configured:
        print(f"Data directory: {settings.data_dir}")
    print(f"Export directory: {settings.export_dir}")
    print(f"User: {args.user or 'anonymous'}")
    return 0


def cmd_locations(args: argparse.Namespace) -> int:
    """Handle the 'locations' command."""
    stores = _stores(args)
    action = args.action or "list"

    if action == "add":
        data = UserLocationCreate(
            name=args.name,
            location=LatLng(lat=args.lat, lng=args.lng),
            uncertainty_radius=args.radius,
            description=args.description,
        )
        created = asyncio.run(stores.locations.add(data))
        print(f"Saved location {created.name} ({created.id})")
        return 0

    if action == "delete":
        asyncio.run(stores.locations.delete(args.id))
        print(f"Deleted location {args.id}")
        return 0

    locations = asyncio.run(stores.locations.fetch())
    if not locations:
        print("No saved locations.")
    for loc in locations:
        print(_format_location(loc))
    return 0


def cmd_observations(args: argparse.Namespace) -> int:
    """Handle the 'observations' command."""
    observations = asyncio.run(_stores(args).observations.fetch())

    if args.recent:
        for taxon in recent_species(observations):
            print(taxon.display_name)
        return 0

    if args.new:
        observations = unexported_observations(observations)
    if not observations:
        print("No observations.")
    for obs in observations:
        print(_format_observation(obs))
    return 0


def cmd_search(args: argparse.Namespace) -> int:
    """Handle the 'search' command."""
    search = SpeciesSearch.from_settings(get_settings())
    search.taxon_group = args.group
    search.debounce = 0
    results = asyncio.run(search.search(args.term))
    if not results:
        print(f"No species found for '{args.term}'.")
        return 0
    for taxon in results:
        group = f"  [{taxon.taxon_group}]" if taxon.taxon_group else ""
        print(f"{taxon.id}  {taxon.display_name}{group}")
    return 0


def cmd_geocode(args: argparse.Namespace) -> int:
    """Handle the 'geocode' command."""
    name = reverse_geocode(args.lat, args.lng, api_base=get_settings().geocoding_api)
    if name is None:
        print("No place name found.", file=sys.stderr)
        return 1
    print(name)
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Handle the 'export' command."""
    stores = _stores(args)
    observations = asyncio.run(stores.observations.fetch())
    if args.new:
        observations = unexported_observations(observations)
    if not observations:
        print("Nothing to export.")
        return 0

    result = asyncio.run(
        stores.exports.export(observations, save_to_storage=not args.no_storage)
    )
    print(f"Exported {result.row_count} rows to {result.local_path}")
    if result.remote_error:
        print(f"Warning: not saved to the datastore: {result.remote_error}", file=sys.stderr)
    elif result.remote_saved:
        print(f"Stored as {result.remote_path}")
    return 0


def cmd_exports(args: argparse.Namespace) -> int:
    """Handle the 'exports' command."""
    stores = _stores(args)
    if not stores.remote:
        print("Export history requires a configured datastore.", file=sys.stderr)
        return 1

    if args.action == "download":
        file_name = args.path.rsplit("/", 1)[-1]
        target = asyncio.run(stores.exports.download(args.path, file_name))
        print(f"Downloaded to {target}")
        return 0

    logs = asyncio.run(stores.exports.logs())
    if not logs:
        print("No exports yet.")
    for log in logs:
        print(
            f"{log.exported_at:%Y-%m-%d %H:%M}  {log.file_name}"
            f"  ({log.observation_count} observations)  {log.file_path or '-'}"
        )
    return 0


def cmd_layer(args: argparse.Namespace) -> int:
    """Handle the 'layer' command."""
    settings = get_settings()
    prefs = Preferences(KeyValueStore(settings.data_dir))
    if args.value:
        prefs.map_layer = args.value
    layer = prefs.map_layer
    print(f"Map layer: {layer}")
    try:
        print(f"Tiles: {tile_url(layer, settings.mapbox_token)}")
    except ValueError as e:
        print(f"Warning: {e}", file=sys.stderr)
    return 0


def cmd_theme(args: argparse.Namespace) -> int:
    """Handle the 'theme' command."""
    prefs = Preferences(KeyValueStore(get_settings().data_dir))
    if args.value:
        prefs.theme = args.value
    print(f"Theme: {prefs.theme}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.debug or get_settings().debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {
        "info": cmd_info,
        "locations": cmd_locations,
        "observations": cmd_observations,
        "search": cmd_search,
        "geocode": cmd_geocode,
        "export": cmd_export,
        "exports": cmd_exports,
        "layer": cmd_layer,
        "theme": cmd_theme,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1
    try:
        return handler(args)
    except ValidationError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
    except RemoteStoreError as e:
        print(f"Datastore error: {e}", file=sys.stderr)
    except KeyError as e:
        print(f"Not found: {e}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
