"""
Catalog Admin CLI

Usage:
    catalog-admin sku "Classic T-Shirt" --size L --color White
    catalog-admin slug "Summer Sale 2024!"
    catalog-admin login admin@example.com
    catalog-admin summary
    catalog-admin seed --products 5
    catalog-admin receipt 42 --output receipts/42.pdf
    catalog-admin users jane
"""

import argparse
import asyncio
import getpass
import inspect
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from catalog_admin.catalog.sku import derive_sku
from catalog_admin.catalog.slugs import generate_slug
from catalog_admin.catalog.validators import CatalogValidationError
from catalog_admin.config.logging import configure_logging
from catalog_admin.data import CatalogSeeder
from catalog_admin.gateway import GatewayError
from catalog_admin.main import AdminConsole
from catalog_admin.reporting import low_stock_variants, order_status_counts

logger = structlog.get_logger(__name__)


# =============================================================================
# OFFLINE COMMANDS
# =============================================================================

def cmd_sku(args: argparse.Namespace) -> int:
    print(derive_sku(args.name, size=args.size, color=args.color, product_id=args.product_id))
    return 0


def cmd_slug(args: argparse.Namespace) -> int:
    print(generate_slug(args.text))
    return 0


# =============================================================================
# BACKEND COMMANDS
# =============================================================================

async def cmd_login(args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Password: ")
    async with AdminConsole(base_url=args.base_url) as console:
        result = await console.login(args.email, password)
    name = (result.user or {}).get("email", args.email)
    print(f"Logged in as {name}")
    return 0


async def cmd_logout(args: argparse.Namespace) -> int:
    async with AdminConsole(base_url=args.base_url) as console:
        await console.logout()
    print("Logged out")
    return 0


async def cmd_summary(args: argparse.Namespace) -> int:
    async with AdminConsole(base_url=args.base_url) as console:
        errors = await console.refresh_all()
        for store, error in errors.items():
            if error:
                print(f"warning: {store}: {error}", file=sys.stderr)

        summary = console.summary()
        print("Catalog")
        print(f"  products         {summary.total_products} ({summary.active_products} active)")
        print(f"  orders           {summary.total_orders}")
        print(f"  revenue          {summary.revenue:,.2f}")
        print(f"  customers        {summary.customers}")
        print(f"  registered users {summary.registered_users}")

        print("Orders by status")
        for status, count in order_status_counts(console.orders.items).items():
            print(f"  {status.value:<16} {count}")

        low_stock = low_stock_variants(console.products.items, args.threshold)
        print(f"Low stock ({low_stock.height} variants)")
        for row in low_stock.iter_rows(named=True):
            print(f"  {row['sku']:<24} {row['stock']:>4}  {row['product_name']}")
    return 0


async def cmd_seed(args: argparse.Namespace) -> int:
    async with AdminConsole(base_url=args.base_url) as console:
        await console.refresh_all()
        seeder = CatalogSeeder(
            console.attributes,
            console.values,
            console.categories,
            console.products,
            seed=args.seed,
            qualify_with_id=console.settings.catalog.sku_qualify_with_id,
        )
        report = await seeder.seed(product_count=args.products)
    print(f"Seeded {len(report.products)} products with {report.variant_count} variants")
    for product in report.products:
        print(f"  {product.slug}: {', '.join(v.sku for v in product.variants)}")
    return 0


async def cmd_users(args: argparse.Namespace) -> int:
    async with AdminConsole(base_url=args.base_url) as console:
        await console.users.load_all()
        if console.users.error:
            print(f"error: {console.users.error}", file=sys.stderr)
            return 1
        users = console.users.search(args.query)
    for user in users:
        print(f"  {user.id:>5}  {user.display_name:<28} {user.email}")
    print(f"{len(users)} users")
    return 0


async def cmd_receipt(args: argparse.Namespace) -> int:
    output = Path(args.output) if args.output else Path(f"receipt-{args.order_id}.pdf")
    async with AdminConsole(base_url=args.base_url) as console:
        content = await console.orders.download_receipt(args.order_id, output)
    print(f"Saved {len(content)} bytes to {output}")
    return 0


# =============================================================================
# ENTRY POINT
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="catalog-admin", description="Catalog administration console")
    parser.add_argument("--base-url", help="Backend base URL (default: ADMIN_API_BASE_URL)")
    parser.add_argument("--log-level", help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sku = subparsers.add_parser("sku", help="Derive a variant SKU")
    sku.add_argument("name", help="Product name")
    sku.add_argument("--size", help="Size value")
    sku.add_argument("--color", help="Color value")
    sku.add_argument("--product-id", type=int, help="Qualify the SKU with a product id")
    sku.set_defaults(handler=cmd_sku)

    slug = subparsers.add_parser("slug", help="Derive a URL slug")
    slug.add_argument("text")
    slug.set_defaults(handler=cmd_slug)

    login = subparsers.add_parser("login", help="Log in as an admin")
    login.add_argument("email")
    login.add_argument("--password", help="Prompted for when omitted")
    login.set_defaults(handler=cmd_login)

    logout = subparsers.add_parser("logout", help="Log out and forget the token")
    logout.set_defaults(handler=cmd_logout)

    summary = subparsers.add_parser("summary", help="Print dashboard figures")
    summary.add_argument("--threshold", type=int, help="Low stock threshold")
    summary.set_defaults(handler=cmd_summary)

    seed = subparsers.add_parser("seed", help="Create demo catalog data")
    seed.add_argument("--products", type=int, default=5, help="Number of products (default: 5)")
    seed.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    seed.set_defaults(handler=cmd_seed)

    users = subparsers.add_parser("users", help="List registered users")
    users.add_argument("query", nargs="?", default="", help="Filter by id, email or name")
    users.set_defaults(handler=cmd_users)

    receipt = subparsers.add_parser("receipt", help="Download an order receipt")
    receipt.add_argument("order_id", type=int)
    receipt.add_argument("--output", help="Target file (default: receipt-<id>.pdf)")
    receipt.set_defaults(handler=cmd_receipt)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        if inspect.iscoroutinefunction(args.handler):
            return asyncio.run(args.handler(args))
        return args.handler(args)
    except CatalogValidationError as e:
        for field_name, message in e.errors.items():
            print(f"error: {field_name}: {message}", file=sys.stderr)
        return 2
    except GatewayError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
