"""CLI progress displays."""

from mapsync.cli.progress.rich import RichSyncProgress

__all__ = ["RichSyncProgress"]
