"""Maison storefront management CLI.

Usage:
    python src/manage.py setup-db                 # Create all tables
    python src/manage.py drop-db                  # Drop all tables
    python src/manage.py seed                     # Load the demo catalogue
    python src/manage.py create-admin EMAIL NAME  # Create an admin (password prompted)
    python src/manage.py dispatch-notifications   # Send pending notifications
    python src/manage.py purge-sessions           # Delete expired sessions
"""

import argparse
import getpass
import sys
from decimal import Decimal

from shared.config import Settings
from shared.db import Database, drop_db, setup_db
from shared.logging import configure_logging

DEMO_PRODUCTS = [
    {
        "product_id": "P1",
        "name": "Quilted Lambskin Shoulder Bag",
        "brand": "Maison Arlette",
        "gender": "women",
        "categories": ["bags", "leather"],
        "price": Decimal("4200.00"),
        "discount_percent": 0,
        "stock": 5,
        "description": "Quilted lambskin with an antique-gold chain strap.",
        "images": ["/images/p1-front.jpg", "/images/p1-side.jpg"],
    },
    {
        "product_id": "P2",
        "name": "Cashmere Double-Breasted Coat",
        "brand": "Valmont",
        "gender": "men",
        "categories": ["outerwear", "cashmere"],
        "price": Decimal("3150.00"),
        "discount_percent": 15,
        "stock": 8,
        "description": "Pure cashmere, horn buttons,\nhand-finished lapels.",
        "images": ["/images/p2-front.jpg"],
    },
    {
        "product_id": "P3",
        "name": "Silk Twill Carré",
        "brand": "Maison Arlette",
        "gender": "unisex",
        "categories": ["accessories", "silk"],
        "price": Decimal("495.00"),
        "discount_percent": 0,
        "stock": 40,
        "description": "90 cm silk twill square with hand-rolled edges.",
        "images": ["/images/p3-flat.jpg"],
    },
    {
        "product_id": "P4",
        "name": "Automatic Chronograph 41mm",
        "brand": "Horlogerie Bessé",
        "gender": "men",
        "categories": ["watches"],
        "price": Decimal("12800.00"),
        "discount_percent": 5,
        "stock": 2,
        "description": "Steel case, sapphire crystal, in-house calibre.",
        "images": ["/images/p4-dial.jpg"],
    },
    {
        "product_id": "P5",
        "name": "Patent Leather Slingback Pumps",
        "brand": "Valmont",
        "gender": "women",
        "categories": ["shoes", "leather"],
        "price": Decimal("890.00"),
        "discount_percent": 20,
        "stock": 12,
        "description": "85 mm heel, leather sole.",
        "images": ["/images/p5-pair.jpg"],
    },
]


def seed_catalogue(database: Database) -> int:
    """Insert the demo products that do not exist yet; return how many were added."""
    from catalogue.product.creation import create_product
    from catalogue.product.product import Product

    added = 0
    with database.transaction() as session:
        for product in DEMO_PRODUCTS:
            if session.get(Product, product["product_id"]) is None:
                create_product(session, **product)
                added += 1
    return added


def create_admin(database: Database, email: str, name: str, password: str):
    from identity.user.user import Role, register_user

    with database.transaction() as session:
        return register_user(session, email=email, name=name, password=password, role=Role.ADMIN)


def main():
    parser = argparse.ArgumentParser(description="Maison storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed", help="Load the demo catalogue")

    admin_parser = subparsers.add_parser("create-admin", help="Create an admin user")
    admin_parser.add_argument("email")
    admin_parser.add_argument("name")

    dispatch_parser = subparsers.add_parser("dispatch-notifications", help="Send pending notifications")
    dispatch_parser.add_argument("--limit", type=int, default=100)

    subparsers.add_parser("purge-sessions", help="Delete expired login sessions")

    args = parser.parse_args()

    settings = Settings.from_env()
    configure_logging(settings)
    database = Database(settings.database_url)

    if args.command == "setup-db":
        setup_db(database)
        print("Schema ready.")
    elif args.command == "drop-db":
        drop_db(database)
        print("Schema dropped.")
    elif args.command == "seed":
        setup_db(database)
        print(f"Added {seed_catalogue(database)} product(s).")
    elif args.command == "create-admin":
        password = getpass.getpass("Password: ")
        user = create_admin(database, args.email, args.name, password)
        print(f"Admin {user.email} created.")
    elif args.command == "dispatch-notifications":
        from notifications.notification.dispatch import dispatch_pending

        result = dispatch_pending(database, limit=args.limit)
        print(f"Sent {result.sent}, retrying {result.retrying}, failed {result.failed}.")
    elif args.command == "purge-sessions":
        from identity.user.session import purge_expired_sessions

        with database.transaction() as session:
            print(f"Removed {purge_expired_sessions(session)} expired session(s).")
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
