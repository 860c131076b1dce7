"""GameZone management CLI.

Usage:
    python src/manage.py setup-db                     # Create all tables
    python src/manage.py drop-db                      # Drop all tables
    python src/manage.py seed                         # Admin account + starter catalogue
    python src/manage.py reconcile --older-than 60    # Finish stalled checkouts

PROTEAN_ENV selects the database (see src/gamezone/domain.toml).
"""

import argparse
import sys


def _services():
    from gamezone.config import Settings
    from gamezone.domain import gamezone
    from gamezone.services import build_services
    from gamezone.storage import Storage

    gamezone.init()
    settings = Settings.from_env()
    return build_services(Storage(gamezone, lock_timeout=settings.store_lock_timeout), settings)


def setup_database():
    from gamezone.domain import gamezone
    from gamezone.utils.db import setup_db

    print("Initializing gamezone domain...")
    gamezone.init()
    print("Creating database schema...")
    setup_db(gamezone)
    print("Done.")


def drop_database():
    from gamezone.domain import gamezone
    from gamezone.utils.db import drop_db

    print("Initializing gamezone domain...")
    gamezone.init()
    print("Dropping database schema...")
    drop_db(gamezone)
    print("Done.")


def seed_catalogue():
    from gamezone.seed import ADMIN, seed

    products = seed(_services())
    print(f"{len(products)} products added")
    print(f"Admin: {ADMIN['email']} / {ADMIN['password']}")


def reconcile(older_than):
    services = _services()
    report = services.reconciler.reconcile(older_than)
    for outcome, order_ids in report.to_dict().items():
        print(f"{outcome}: {len(order_ids)}")
        for order_id in order_ids:
            print(f"  {order_id}")


def main():
    parser = argparse.ArgumentParser(description="GameZone management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed", help="Create the admin account and starter products")

    reconcile_parser = subparsers.add_parser("reconcile", help="Finish checkouts and cancellations left halfway")
    reconcile_parser.add_argument(
        "--older-than",
        type=int,
        default=None,
        help="Only touch orders idle for this many seconds (default: RECONCILE_AFTER_SECONDS)",
    )

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed":
        seed_catalogue()
    elif args.command == "reconcile":
        reconcile(args.older_than)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
