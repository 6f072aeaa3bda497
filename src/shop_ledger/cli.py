#!/usr/bin/env python3
# PYTHON_ARGCOMPLETE_OK
"""
Command-line interface for shop-ledger
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import argcomplete

from . import snapshot
from ._version import __version__
from .config import Config
from .console import EMPTY_MESSAGE, ConsoleShell, format_bill, format_products_table
from .errors import LedgerError, NotFoundError
from .ledger import Ledger
from .models import BillDate, format_price


def _load_ledger(backup_file: Path, strict: bool = False) -> Ledger | None:
    """Restore a ledger from a backup file, printing any problem.

    Returns None if the backup could not be read.
    """
    ledger = Ledger()
    try:
        issues = ledger.restore(backup_file, strict=strict)
    except NotFoundError:
        print(f"❌ Backup file not found: {backup_file}")
        return None
    except LedgerError as e:
        print(f"❌ {e}")
        return None
    except OSError as e:
        print(f"❌ Could not read {backup_file}: {e}")
        return None
    for issue in issues:
        print(f"⚠️  Stopped reading {backup_file} at {issue}", file=sys.stderr)
    return ledger


def shell_command(config: Config, backup_file: Path, restore: bool = False, strict: bool = False) -> int:
    """Run the interactive menu."""
    try:
        access_code = config.access_code
    except ValueError as e:
        print(f"❌ Configuration error: {e}")
        return 1

    ledger = Ledger()
    if restore:
        restored = _load_ledger(backup_file, strict)
        if restored is None:
            return 1
        ledger = restored
        print(f"✅ Restored {len(ledger)} products from {backup_file}")

    shell = ConsoleShell(
        ledger,
        backup_file=backup_file,
        snapshot_format=config.snapshot_format,
        strict=strict,
        access_code=access_code,
        employees=config.employees,
    )
    return shell.run()


def list_command(backup_file: Path, strict: bool = False) -> int:
    """Print every product in the backup, head-first."""
    ledger = _load_ledger(backup_file, strict)
    if ledger is None:
        return 1
    products = ledger.list()
    if not products:
        print(EMPTY_MESSAGE)
        return 0
    for line in format_products_table(products):
        print(line)
    return 0


def find_command(backup_file: Path, product_id: int, strict: bool = False) -> int:
    """Print one product from the backup."""
    ledger = _load_ledger(backup_file, strict)
    if ledger is None:
        return 1
    try:
        product = ledger.find(product_id)
    except NotFoundError as e:
        print(f"❌ {e}")
        return 1
    for line in format_products_table([product]):
        print(line)
    return 0


def total_command(backup_file: Path, strict: bool = False) -> int:
    """Print the total sales value of the backup."""
    ledger = _load_ledger(backup_file, strict)
    if ledger is None:
        return 1
    print(f"Total Sales: {format_price(ledger.total_sales())}")
    return 0


def bill_command(backup_file: Path, day: int, month: int, year: int, strict: bool = False) -> int:
    """Print a bill for every product in the backup."""
    ledger = _load_ledger(backup_file, strict)
    if ledger is None:
        return 1
    if not len(ledger):
        print(EMPTY_MESSAGE)
        return 0
    for line in format_bill(ledger.generate_bill(BillDate(day, month, year))):
        print(line)
    return 0


def convert_command(backup_file: Path, to_format: str, output: Path | None = None, strict: bool = False) -> int:
    """Rewrite a backup in another snapshot format.

    The head-first order is kept; products are written exactly as
    they appear in the source file.
    """
    try:
        products, issues = snapshot.read_snapshot(backup_file, strict=strict)
    except NotFoundError:
        print(f"❌ Backup file not found: {backup_file}")
        return 1
    except LedgerError as e:
        print(f"❌ {e}")
        return 1
    except OSError as e:
        print(f"❌ Could not read {backup_file}: {e}")
        return 1
    for issue in issues:
        print(f"⚠️  Stopped reading {backup_file} at {issue}", file=sys.stderr)

    if output is None:
        output = backup_file
    try:
        count = snapshot.write_snapshot(output, products, to_format)
    except OSError as e:
        print(f"❌ Could not write {output}: {e}")
        return 1
    print(f"✅ Wrote {count} products to {output} ({to_format})")
    return 0


def config_command(show: bool = False, show_path: bool = False) -> int:
    """Show configuration information."""
    config = Config()

    if show_path:
        if config.path:
            print(config.path)
        else:
            print("No configuration file found")
        return 0

    if config.path:
        print(f"# Configuration loaded from: {config.path}")
    else:
        print("# No configuration file found, showing defaults")
    print()
    print(json.dumps(config.data, indent=2))
    return 0


def build_parser(config: Config) -> argparse.ArgumentParser:
    parser_cli = argparse.ArgumentParser(
        prog="shop-ledger",
        description="shop-ledger - Inventory ledger for a small shop",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start the interactive menu
  shop-ledger shell

  # Start the menu with the last backup loaded
  shop-ledger shell --restore

  # Print the products in a backup
  shop-ledger --backup store.txt list

  # Print a bill dated 24 March 2024
  shop-ledger bill 24 3 2024

  # Convert a legacy backup to the JSON format
  shop-ledger convert --to json --output inventory_backup.json
        """
    )
    parser_cli.add_argument(
        '--version', '-V',
        action='version',
        version=f'%(prog)s {__version__}'
    )
    parser_cli.add_argument('--verbose', '-v', action='store_true', help='Show debug logging')
    parser_cli.add_argument('--backup', '-b', type=Path, default=None,
                            help=f'Backup file (default: {config.backup_file})')
    parser_cli.add_argument('--strict', action='store_true',
                            help='Fail on the first malformed backup record instead of stopping there')

    subparsers = parser_cli.add_subparsers(dest='command', help='Command to run')

    shell_parser = subparsers.add_parser('shell', help='Interactive menu (default)')
    shell_parser.add_argument('--restore', '-r', action='store_true', help='Restore the backup before starting')

    subparsers.add_parser('list', help='List products in the backup')

    find_parser = subparsers.add_parser('find', help='Show one product from the backup')
    find_parser.add_argument('id', type=int, help='Product ID')

    subparsers.add_parser('total', help='Show total sales value of the backup')

    bill_parser = subparsers.add_parser('bill', help='Print a bill for the backup')
    bill_parser.add_argument('day', type=int)
    bill_parser.add_argument('month', type=int)
    bill_parser.add_argument('year', type=int)

    convert_parser = subparsers.add_parser('convert', help='Rewrite the backup in another format')
    convert_parser.add_argument('--to', '-t', dest='to_format', choices=list(snapshot.FORMATS), required=True,
                                help='Target format')
    convert_parser.add_argument('--output', '-o', type=Path, help='Output file (default: overwrite the backup)')

    config_parser = subparsers.add_parser('config', help='Show configuration')
    config_parser.add_argument('--show', action='store_true', help='Show merged configuration')
    config_parser.add_argument('--path', action='store_true', help='Show config file path')

    argcomplete.autocomplete(parser_cli)
    return parser_cli


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    config = Config()
    parser_cli = build_parser(config)
    args = parser_cli.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    backup_file = args.backup if args.backup is not None else config.backup_file
    strict = args.strict or config.snapshot_strict

    if args.command is None or args.command == 'shell':
        return shell_command(config, backup_file, restore=getattr(args, "restore", False), strict=strict)
    elif args.command == 'list':
        return list_command(backup_file, strict)
    elif args.command == 'find':
        return find_command(backup_file, args.id, strict)
    elif args.command == 'total':
        return total_command(backup_file, strict)
    elif args.command == 'bill':
        return bill_command(backup_file, args.day, args.month, args.year, strict)
    elif args.command == 'convert':
        return convert_command(backup_file, args.to_format, args.output, strict)
    elif args.command == 'config':
        return config_command(show=args.show, show_path=args.path)
    else:
        parser_cli.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
