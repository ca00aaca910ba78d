"""Status command formatting."""

from __future__ import annotations

import argparse

from mapsync import CacheStatus


def _mark(present: bool) -> str:
    return "ok" if present else "missing"


def format_status(status: CacheStatus) -> str:
    lines = ["", "mapsync - cache status", "", f"  Data dir:  {status.data_dir}", ""]
    lines.append("  Base files:")
    lines.extend(f"    {name:<26} {_mark(present)}" for name, present in status.base_files.items())
    lines.append("")
    if not status.map_versions:
        lines.append("  Maps:      none cached")
    else:
        lines.append("  Maps:")
        for map_id, version in status.map_versions.items():
            files = status.map_files.get(map_id, {})
            missing = [name for name, present in files.items() if not present]
            suffix = f" (missing: {', '.join(missing)})" if missing else ""
            lines.append(f"    {map_id:<20} {version}{suffix}")
    lines.append("")
    return "\n".join(lines)


async def run_status(args: argparse.Namespace) -> CacheStatus:
    import mapsync.cli as cli

    config = cli.load_config(args.config)
    sdk = await cli.MapSync.from_config(config)
    status = await sdk.status()
    print(cli._format_status(status))
    return status


__all__ = ["format_status", "run_status"]
