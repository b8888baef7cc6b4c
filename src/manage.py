"""Parcel locker database management CLI.

Creates and drops the lockers schema on SQL providers. Select the database
with PROTEAN_ENV (for example ``PROTEAN_ENV=sqlite``).

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def setup_databases():
    from lockers.domain import lockers
    from lockers.utils.db import setup_db

    print("Initializing lockers domain...")
    lockers.init()
    print("Creating lockers database schema...")
    setup_db(lockers)
    print("Done.")


def drop_databases():
    from lockers.domain import lockers
    from lockers.utils.db import drop_db

    print("Initializing lockers domain...")
    lockers.init()
    print("Dropping lockers database schema...")
    drop_db(lockers)
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Parcel locker database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
