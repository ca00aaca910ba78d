"""Sync command formatting."""

from __future__ import annotations

import argparse

from mapsync import MapSyncConfig, SyncReport
from mapsync.cli.progress.rich import RichSyncProgress


def format_sync_summary(report: SyncReport, config: MapSyncConfig) -> str:
    lines = [
        "",
        "mapsync - sync complete",
        "",
        f"  Provider:  {config.provider}",
        f"  Cache:     {config.cache_dir}",
        "",
    ]
    if not report.remote_ready:
        lines.append("  Status:    remote unavailable, cached data kept")
    else:
        lines.append(f"  Maps:      {report.catalog_size} in catalog")
        updated = report.maps_updated
        if updated:
            lines.append(f"  Updated:   {len(updated)} ({', '.join(sorted(updated))})")
        synced = report.collections_synced
        if synced:
            lines.append(f"  Static:    {', '.join(collection.value for collection in synced)}")
        if report.removed_files:
            lines.append(f"  Removed:   {len(report.removed_files)} unused map file(s)")
        if not updated and not synced:
            lines.append("  Status:    all data up to date")

    if report.errors:
        lines.append("")
        lines.append(f"  Errors:    {len(report.errors)}")
        lines.extend(f"    - {error}" for error in report.errors)

    lines.append("")
    return "\n".join(lines)


async def run_sync(args: argparse.Namespace) -> SyncReport:
    import mapsync.cli as cli

    config = cli.load_config(args.config)

    if not args.verbose and not args.no_progress:
        with RichSyncProgress() as progress:
            sdk = await cli.MapSync.from_config(config, progress=progress)
            report = await sdk.check_and_sync()
    else:
        sdk = await cli.MapSync.from_config(config)
        report = await sdk.check_and_sync()

    print(cli._format_summary(report, config))
    return report


__all__ = ["format_sync_summary", "run_sync"]
