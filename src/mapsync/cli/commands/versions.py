"""Version listing and switching commands."""

from __future__ import annotations

import argparse

from mapsync import MapSyncOutcome, SyncError


def format_versions(map_id: str, versions: list[str], current: str) -> str:
    if not versions:
        return f"No versions published for map {map_id}"
    lines = [f"Versions of map {map_id}:"]
    lines.extend(f"  {'*' if version == current else ' '} {version}" for version in versions)
    return "\n".join(lines)


def format_switch_summary(outcome: MapSyncOutcome) -> str:
    lines = [f"Map {outcome.map_id} switched to {outcome.version}"]
    if outcome.written:
        lines.append(f"  Written:   {', '.join(outcome.written)}")
    if outcome.skipped:
        lines.append(f"  Skipped:   {', '.join(outcome.skipped)}")
    return "\n".join(lines)


async def run_versions_list(args: argparse.Namespace) -> list[str]:
    import mapsync.cli as cli

    config = cli.load_config(args.config)
    sdk = await cli.MapSync.from_config(config)
    versions = await sdk.available_versions(args.map_id)
    current = await sdk.current_version(args.map_id)
    print(cli._format_versions(args.map_id, versions, current))
    return versions


async def run_versions_switch(args: argparse.Namespace) -> MapSyncOutcome:
    import mapsync.cli as cli

    config = cli.load_config(args.config)
    sdk = await cli.MapSync.from_config(config)
    outcome = await sdk.switch_version(args.map_id, args.target_version)
    if outcome.error:
        raise SyncError(f"switching map {args.map_id} to {args.target_version} failed: {outcome.error}")
    if not outcome.committed:
        raise SyncError(f"version {args.target_version} of map {args.map_id} was not recorded")
    print(cli._format_switch_summary(outcome))
    return outcome


__all__ = ["format_switch_summary", "format_versions", "run_versions_list", "run_versions_switch"]
