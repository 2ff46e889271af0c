#!/usr/bin/env python
# inventory_intelligence/run_refresh.py - Run a refresh over a JSON snapshot
"""
Command line interface for inventory intelligence refreshes.

Reads an input snapshot (and optionally the previous run's result), applies
lifecycle commands, runs a refresh and prints the ranked suggestions.
"""
import argparse
import logging
import sys

from tabulate import tabulate

from inventory_intelligence.config import config
from inventory_intelligence.batch.refresh_job import run_refresh
from inventory_intelligence.models import LifecycleCommand
from inventory_intelligence.snapshot import load_snapshot, load_suggestions, write_result
from inventory_intelligence.utils.date_utils import convert_to_datetime, utc_now
from inventory_intelligence.exceptions import IntelligenceError
from inventory_intelligence.logging_setup import get_logger, logger as log_manager

logger = get_logger('refresh_runner')

def build_commands(args):
    """Lifecycle commands from the command line, in accept/dismiss/snooze order."""
    commands = []
    for suggestion_id in args.accept or []:
        commands.append(LifecycleCommand.accept(suggestion_id))
    for suggestion_id in args.dismiss or []:
        commands.append(LifecycleCommand.dismiss(suggestion_id, reason=args.reason))
    for suggestion_id, until in args.snooze or []:
        commands.append(LifecycleCommand.snooze(suggestion_id, convert_to_datetime(until)))
    return commands

def arrival_window(suggestion):
    """Earliest to latest arrival of a transfer, '-' when unknown."""
    details = suggestion.details
    earliest = getattr(details, 'earliest_arrival', None)
    latest = getattr(details, 'latest_arrival', None)
    if earliest is None or latest is None:
        return '-'
    return f"{earliest.isoformat()} to {latest.isoformat()}"

def print_result(result):
    """Print the suggestions and dashboard of a refresh result."""
    table_data = []
    for suggestion in result.suggestions:
        days = suggestion.days_of_stock_remaining
        table_data.append([
            suggestion.sku,
            suggestion.destination_location_id,
            suggestion.urgency.value,
            suggestion.status.value,
            suggestion.type.value,
            suggestion.source_location_id or suggestion.supplier_id or '-',
            f"{days:.1f}" if days is not None else '-',
            suggestion.recommended_qty,
            suggestion.estimated_arrival.isoformat() if suggestion.estimated_arrival else '-',
            arrival_window(suggestion),
        ])

    print("\nReplenishment Suggestions:")
    print(tabulate(
        table_data,
        headers=['SKU', 'Destination', 'Urgency', 'Status', 'Type', 'From', 'Days Left', 'Qty', 'ETA', 'Arrival Window']
    ))

    dashboard = result.dashboard
    counts = dashboard.urgency_counts
    print(f"\nActive Suggestions: {dashboard.total_suggestions} "
          f"(critical {counts.critical}, warning {counts.warning}, "
          f"planned {counts.planned}, monitor {counts.monitor})")

    health_data = [
        [h.location_name, h.location_type, h.total_products, h.healthy_count,
         h.warning_count, h.critical_count, f"{h.total_value:,.2f}"]
        for h in dashboard.location_health
    ]
    print("\nLocation Health:")
    print(tabulate(
        health_data,
        headers=['Location', 'Type', 'Products', 'Healthy', 'Warning', 'Critical', 'Stock Value']
    ))

    if result.notifications:
        print("\nNotifications:")
        for notification in result.notifications:
            print(f"  {notification.title} - {notification.message}")

def main(argv=None):
    """Run a refresh from the command line."""
    parser = argparse.ArgumentParser(description='Run an inventory intelligence refresh')
    parser.add_argument('--snapshot', '-s', required=True, help='Input snapshot JSON file')
    parser.add_argument('--previous', '-p', help='Previous refresh result or suggestions JSON file')
    parser.add_argument('--output', '-o', help='Write the refresh result to this JSON file')
    parser.add_argument('--now', help='Run timestamp (ISO 8601, offsets converted to UTC; defaults to the current UTC time)')
    parser.add_argument('--max-workers', type=int, help='Worker threads for the per-pair stages')
    parser.add_argument('--accept', action='append', metavar='ID', help='Accept a previous suggestion')
    parser.add_argument('--dismiss', action='append', metavar='ID', help='Dismiss a previous suggestion')
    parser.add_argument('--reason', help='Reason recorded with --dismiss')
    parser.add_argument('--snooze', action='append', nargs=2, metavar=('ID', 'UNTIL'),
                        help='Snooze a previous suggestion until a timestamp (UTC unless an offset is given)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')

    args = parser.parse_args(argv)

    if args.verbose:
        log_manager.set_level(logging.DEBUG)

    try:
        now = convert_to_datetime(args.now) if args.now else utc_now()
        settings = config.intelligence_settings()
        snapshot = load_snapshot(args.snapshot)
        previous = load_suggestions(args.previous) if args.previous else []
        commands = build_commands(args)

        logger.info(f"Running refresh over {args.snapshot} at {now.isoformat()}")
        result = run_refresh(
            snapshot,
            settings,
            now,
            previous=previous,
            commands=commands,
            max_workers=args.max_workers
        )

        print_result(result)

        if args.output:
            path = write_result(result, args.output)
            logger.info(f"Refresh result written to {path}")

        return 0

    except IntelligenceError as e:
        logger.error(f"Refresh failed: {str(e)}")
        return 1
    except (OSError, ValueError) as e:
        logger.error(f"Error reading input: {str(e)}")
        return 1

if __name__ == "__main__":
    sys.exit(main())
