"""Pydantic schemas for dashboard analytics input rows and aggregated output."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator


def _assume_utc(value: datetime | None) -> datetime | None:
    """Treat naive timestamps as UTC so rows from different sources compare."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class OrderRow(BaseModel):
    id: str
    created_at: datetime
    total_amount: float
    status: str | None = None
    payment_method: str
    customer_id: str | None = None

    _normalise_created_at = field_validator("created_at")(_assume_utc)


class OrderItemRow(BaseModel):
    item_id: str
    quantity: int = Field(ge=0)
    created_at: datetime | None = None

    _normalise_created_at = field_validator("created_at")(_assume_utc)


class ItemPriceRow(BaseModel):
    """Historical base (cost) price of an item for a validity window."""

    item_id: str
    base_price: float
    effective_from: datetime | None = None
    effective_until: datetime | None = None

    _normalise_window = field_validator("effective_from", "effective_until")(_assume_utc)


class PopularItemRow(BaseModel):
    name: str
    total_sold: int


class LowStockItemRow(BaseModel):
    name: str
    stock_quantity: int
    min_stock_level: int | None = None


class RevenuePoint(BaseModel):
    created_at: datetime
    total_amount: float


class StatusCount(BaseModel):
    status: str
    count: int = Field(ge=0)


class PaymentMethodRevenue(BaseModel):
    payment_method: str
    total_amount: float


class SummaryMetrics(BaseModel):
    total_revenue: float
    total_orders: int = Field(ge=0)
    total_customers: int = Field(ge=0)
    total_capital: float
    profit_margin: float


class MoneyBreakdown(BaseModel):
    revenue: float
    capital: float
    profit: float


class AnalyticsData(BaseModel):
    """Everything the dashboard overview renders for one project."""

    revenue_and_orders: list[RevenuePoint]
    order_status_distribution: list[StatusCount]
    popular_items: list[PopularItemRow]
    low_stock_items: list[LowStockItemRow]
    revenue_by_payment_method: list[PaymentMethodRevenue]
    summary_metrics: SummaryMetrics
    money_breakdown: MoneyBreakdown
