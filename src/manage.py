"""Harvest Market ordering management CLI.

Usage:
    python src/manage.py setup-db   # Create order tables
    python src/manage.py drop-db    # Drop order tables
"""

import argparse
import sys


def _ordering():
    from ordering.domain import ordering

    ordering.init()
    return ordering


def setup_databases():
    from ordering.utils.db import setup_db

    providers = setup_db(_ordering())
    print(f"Order schema ready ({', '.join(providers) or 'no relational providers'}).")


def drop_databases():
    from ordering.utils.db import drop_db

    providers = drop_db(_ordering())
    print(f"Order schema dropped ({', '.join(providers) or 'no relational providers'}).")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Harvest Market ordering management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args(argv)
    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    return 0


if __name__ == "__main__":
    sys.exit(main())
