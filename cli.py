#!/usr/bin/env python3
"""Unified CLI for the travel backoffice.

Usage:
    python cli.py operations --help
"""
import sys
import argparse


def main():
    parser = argparse.ArgumentParser(
        description='Travel Backoffice',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modules:
  operations    Departure groups, supplier payments, deadlines

Examples:
  python cli.py operations --catalog data/catalog.yml --store data/operations.json seed
  python cli.py operations --store data/operations.json list --role sales_agent
  python cli.py operations --store data/operations.json milestone ops-pkg-1 grp-3f2a9c81d0e4 air_deposit --paid
"""
    )

    parser.add_argument(
        'module',
        choices=['operations'],
        help='Module to run'
    )

    # Parse just the module, pass rest to submodule
    args, remaining = parser.parse_known_args()

    # Dispatch to module CLI
    if args.module == 'operations':
        from modules.operations.cli import main as ops_main
        sys.exit(ops_main(remaining))


if __name__ == '__main__':
    main()
