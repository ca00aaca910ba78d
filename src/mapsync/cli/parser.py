"""CLI parser construction."""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version


def _package_version() -> str:
    try:
        return version("campus-mapsync")
    except PackageNotFoundError:
        return "0.0.0"


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", default="./mapsync.json", help="Path to mapsync.json")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mapsync")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    sync_parser = subparsers.add_parser("sync", help="Sync map catalog, map versions and static data")
    _add_common(sync_parser)
    sync_parser.add_argument("--no-progress", action="store_true", help="Disable the live progress display")

    status_parser = subparsers.add_parser("status", help="Show local cache status")
    _add_common(status_parser)

    versions_parser = subparsers.add_parser("versions", help="Map version operations")
    versions_subparsers = versions_parser.add_subparsers(dest="versions_command", required=True)

    list_parser = versions_subparsers.add_parser("list", help="List versions published for a map")
    _add_common(list_parser)
    list_parser.add_argument("--map-id", required=True, help="Map identifier")

    switch_parser = versions_subparsers.add_parser("switch", help="Download a specific version of a map")
    _add_common(switch_parser)
    switch_parser.add_argument("--map-id", required=True, help="Map identifier")
    switch_parser.add_argument("--version", dest="target_version", required=True, help="Version to switch to")

    return parser


__all__ = ["build_parser"]
