"""Command-line interface for mapsync."""

from __future__ import annotations

import asyncio as asyncio
import logging as logging

from mapsync import MapSync as MapSync
from mapsync import load_config as load_config
from mapsync.cli.app import main as main
from mapsync.cli.commands import status as status_command
from mapsync.cli.commands import sync as sync_command
from mapsync.cli.commands import versions as versions_command
from mapsync.cli.parser import build_parser as build_parser

_format_summary = sync_command.format_sync_summary
_format_status = status_command.format_status
_format_versions = versions_command.format_versions
_format_switch_summary = versions_command.format_switch_summary

_run_sync = sync_command.run_sync
_run_status = status_command.run_status
_run_versions_list = versions_command.run_versions_list
_run_versions_switch = versions_command.run_versions_switch

__all__ = ["build_parser", "main"]
