"""
Catalog Reporting

Polars views over the cached stores for the dashboard and order pages:
- Order and variant frames
- Order counts per status
- Low-stock variants
- Headline dashboard figures
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, Optional

import polars as pl
import structlog

from catalog_admin.catalog.models import Order, OrderStatus, Product, User
from catalog_admin.config import get_settings

logger = structlog.get_logger(__name__)


ORDER_SCHEMA = {
    "order_id": pl.Int64,
    "user_id": pl.Int64,
    "email": pl.Utf8,
    "status": pl.Utf8,
    "payment_method": pl.Utf8,
    "total": pl.Float64,
    "item_count": pl.Int64,
    "created_at": pl.Datetime,
}

VARIANT_SCHEMA = {
    "product_id": pl.Int64,
    "product_name": pl.Utf8,
    "product_active": pl.Boolean,
    "variant_id": pl.Int64,
    "sku": pl.Utf8,
    "price": pl.Float64,
    "stock": pl.Int64,
    "variant_active": pl.Boolean,
}


@dataclass
class DashboardSummary:
    """Headline figures of the admin dashboard"""
    total_products: int
    active_products: int
    total_orders: int
    revenue: float
    customers: int
    registered_users: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def orders_frame(orders: Iterable[Order]) -> pl.DataFrame:
    """One row per order"""
    rows = [
        {
            "order_id": order.id,
            "user_id": order.user_id,
            "email": order.user.email if order.user else None,
            "status": order.status.value,
            "payment_method": order.payment_method,
            "total": float(order.total),
            "item_count": sum(item.quantity for item in order.items),
            "created_at": order.created_at,
        }
        for order in orders
    ]
    return pl.DataFrame(rows, schema=ORDER_SCHEMA)


def variants_frame(products: Iterable[Product]) -> pl.DataFrame:
    """One row per live (not soft-deleted) variant"""
    rows = [
        {
            "product_id": product.id,
            "product_name": product.name,
            "product_active": product.is_active,
            "variant_id": variant.id,
            "sku": variant.sku,
            "price": float(variant.price),
            "stock": variant.stock,
            "variant_active": variant.is_active,
        }
        for product in products
        if not product.is_deleted
        for variant in product.variants
        if not variant.is_deleted
    ]
    return pl.DataFrame(rows, schema=VARIANT_SCHEMA)


def order_status_counts(orders: Iterable[Order]) -> Dict[OrderStatus, int]:
    """Orders per status; statuses with no orders count zero"""
    df = orders_frame(orders)
    counts = {status: 0 for status in OrderStatus}
    if df.is_empty():
        return counts

    grouped = df.group_by("status").agg(pl.len().alias("count"))
    for row in grouped.iter_rows(named=True):
        counts[OrderStatus(row["status"])] = row["count"]
    return counts


def low_stock_variants(
    products: Iterable[Product],
    threshold: Optional[int] = None,
) -> pl.DataFrame:
    """
    Active variants whose stock is at or below the threshold.

    Args:
        products: Product records
        threshold: Stock level to report at; defaults to
            CATALOG_LOW_STOCK_THRESHOLD

    Returns:
        Variant rows sorted by ascending stock, then SKU
    """
    if threshold is None:
        threshold = get_settings().catalog.low_stock_threshold

    return (
        variants_frame(products)
        .filter(pl.col("variant_active") & (pl.col("stock") <= threshold))
        .sort(["stock", "sku"])
    )


def dashboard_summary(
    products: Iterable[Product],
    orders: Iterable[Order],
    users: Iterable[User] = (),
) -> DashboardSummary:
    products = [product for product in products if not product.is_deleted]
    df = orders_frame(orders)

    # Cancelled orders never count towards revenue
    billable = df.filter(pl.col("status") != OrderStatus.CANCELLED.value)
    revenue = float(billable["total"].sum()) if not billable.is_empty() else 0.0

    summary = DashboardSummary(
        total_products=len(products),
        active_products=sum(1 for product in products if product.is_active),
        total_orders=df.height,
        revenue=round(revenue, 2),
        customers=df["user_id"].n_unique() if not df.is_empty() else 0,
        registered_users=len(list(users)),
    )
    logger.debug("Dashboard summary computed", **summary.to_dict())
    return summary
