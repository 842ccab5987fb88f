"""Database management CLI for the Quality and Notifications domains.

Usage:
    python src/manage.py setup-db                      # Create all tables
    python src/manage.py drop-db                       # Drop all tables
    python src/manage.py setup-db --domain quality     # One domain only
"""

import argparse
import sys

from shared.db import drop_db, setup_db

DOMAIN_NAMES = ["quality", "notifications"]


def _domains(names=None):
    from notifications.domain import notifications
    from quality.domain import quality

    all_domains = {"quality": quality, "notifications": notifications}
    return {name: all_domains[name] for name in (names or DOMAIN_NAMES)}


def setup_databases(names=None):
    """Create database schemas for the specified (or all) domains."""
    for name, domain in _domains(names).items():
        print(f"Initializing {name} domain...")
        domain.init()
        count = setup_db(domain)
        print(f"  {name}: {count} relational provider(s) ready.")
    print("Done.")


def drop_databases(names=None):
    """Drop database schemas for the specified (or all) domains."""
    for name, domain in _domains(names).items():
        print(f"Initializing {name} domain...")
        domain.init()
        count = drop_db(domain)
        print(f"  {name}: {count} relational provider(s) dropped.")
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Quality & Notifications database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for command, help_text in (("setup-db", "Create all database tables"), ("drop-db", "Drop all database tables")):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument(
            "--domain",
            choices=DOMAIN_NAMES,
            nargs="*",
            help="Specific domain(s) (default: all)",
        )

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases(args.domain)
    elif args.command == "drop-db":
        drop_databases(args.domain)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
