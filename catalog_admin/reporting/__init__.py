"""
Catalog Reporting Module
"""
from .summary import (
    DashboardSummary,
    dashboard_summary,
    low_stock_variants,
    order_status_counts,
    orders_frame,
    variants_frame,
)

__all__ = [
    "DashboardSummary",
    "dashboard_summary",
    "low_stock_variants",
    "order_status_counts",
    "orders_frame",
    "variants_frame",
]
