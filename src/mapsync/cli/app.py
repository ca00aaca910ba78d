"""CLI app entrypoint and error mapping."""

from __future__ import annotations

import sys

from mapsync import AuthenticationError, CacheStoreError, ConfigError, RemoteStoreError, SyncError


def main(argv: list[str] | None = None) -> int:
    import mapsync.cli as cli

    parser = cli.build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        cli.logging.basicConfig(level=cli.logging.DEBUG, format="%(name)s %(message)s", stream=sys.stderr)

    try:
        if args.command == "sync":
            cli.asyncio.run(cli._run_sync(args))
        elif args.command == "status":
            cli.asyncio.run(cli._run_status(args))
        elif args.command == "versions":
            if args.versions_command == "list":
                cli.asyncio.run(cli._run_versions_list(args))
            elif args.versions_command == "switch":
                cli.asyncio.run(cli._run_versions_switch(args))
            else:
                print(f"error: unsupported versions command: {args.versions_command}", file=sys.stderr)
                return 2
        return 0
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3
    except (AuthenticationError, RemoteStoreError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 4
    except (SyncError, CacheStoreError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 5
    except Exception as exc:  # pragma: no cover
        print(f"error: {exc}", file=sys.stderr)
        return 1


__all__ = ["main"]
