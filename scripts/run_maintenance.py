#!/usr/bin/env python3
"""
Operator script for the periodic maintenance jobs.

Usage:
    python scripts/run_maintenance.py backfill-posters
    python scripts/run_maintenance.py sweep [--dry-run] [-y]

Commands:
    backfill-posters  Extract posters for processed videos that have none
    sweep             Delete asset directories no video row refers to

Settings are read the same way the API reads them (config/appsettings*.json
plus HLSFORGE__ environment variables).
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import dataclass

from hlsforge.api.dependencies import build_playback_service, build_poster_service
from hlsforge.commons.settings import get_settings
from hlsforge.commons.telemetry import configure_logging, set_correlation_id
from hlsforge.infrastructure.factory import InfrastructureFactory


@dataclass
class MaintenanceArgs:
    """Parsed command line arguments."""

    command: str
    dry_run: bool
    skip_confirm: bool


def parse_args() -> MaintenanceArgs:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Run hlsforge maintenance jobs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("command", choices=["backfill-posters", "sweep"])
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="sweep: list orphaned directories without deleting them",
    )
    parser.add_argument(
        "-y", "--yes", action="store_true", help="Skip confirmation prompt"
    )

    args = parser.parse_args()
    return MaintenanceArgs(
        command=args.command,
        dry_run=args.dry_run,
        skip_confirm=args.yes,
    )


async def backfill_posters(factory: InfrastructureFactory) -> int:
    """Run the poster backfill and print its report."""
    service = build_poster_service(factory, get_settings())
    report = await service.backfill_posters()

    print(f"Candidates: {report.candidates}")
    print(f"Updated:    {len(report.updated)}")
    for failure in report.failures:
        print(f"  FAILED video {failure.video_id} ({failure.fingerprint}): {failure.reason}")

    return 1 if report.has_failures else 0


async def sweep(factory: InfrastructureFactory, args: MaintenanceArgs) -> int:
    """Find orphaned asset directories and delete them unless dry-running."""
    service = build_playback_service(factory)

    orphans, scanned = await service.find_orphans()
    print(f"Scanned {scanned} directories, {len(orphans)} orphaned")
    for name in orphans:
        print(f"  {name}")

    if args.dry_run or not orphans:
        return 0

    if not args.skip_confirm:
        response = input("\nDelete these directories? [y/N]: ")
        if response.lower() not in ("y", "yes"):
            print("Aborted.")
            return 0

    report = await service.sweep_orphans()
    print(f"Removed {len(report.removed)}, failed {len(report.failed)}")
    return 1 if report.failed else 0


async def run(args: MaintenanceArgs) -> int:
    """Execute the selected job and return the exit code."""
    settings = get_settings()
    factory = InfrastructureFactory(settings)
    set_correlation_id(f"maintenance-{args.command}")
    try:
        if args.command == "backfill-posters":
            return await backfill_posters(factory)
        return await sweep(factory, args)
    finally:
        await factory.close_all()


def main() -> None:
    """Main entry point."""
    args = parse_args()
    settings = get_settings()
    configure_logging(
        level=settings.telemetry.log_level,
        format_type=settings.telemetry.log_format,
        logger_name="hlsforge",
    )
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
