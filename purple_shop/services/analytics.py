"""Aggregates fetched order rows into the dashboard analytics payload."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Final

from purple_shop.schemas.analytics import (
    AnalyticsData,
    ItemPriceRow,
    LowStockItemRow,
    MoneyBreakdown,
    OrderItemRow,
    OrderRow,
    PaymentMethodRevenue,
    PopularItemRow,
    RevenuePoint,
    StatusCount,
    SummaryMetrics,
)

SETTLED_STATUSES: Final[frozenset[str]] = frozenset({"paid", "done"})


def build_analytics(
    *,
    orders: Sequence[OrderRow],
    order_items: Iterable[OrderItemRow],
    item_prices: Sequence[ItemPriceRow],
    popular_items: Iterable[PopularItemRow] = (),
    low_stock_items: Iterable[LowStockItemRow] = (),
) -> AnalyticsData:
    """Return revenue, capital and distribution figures for one project.

    Revenue counts every order; the payment-method breakdown only counts
    settled (``paid``/``done``) orders. Capital is the base price valid at
    the time each order item was created, times its quantity.
    """
    total_revenue = sum(order.total_amount for order in orders)
    total_capital = calculate_total_capital(order_items, item_prices)

    return AnalyticsData(
        revenue_and_orders=[
            RevenuePoint(created_at=order.created_at, total_amount=order.total_amount)
            for order in orders
        ],
        order_status_distribution=order_status_distribution(orders),
        popular_items=list(popular_items),
        low_stock_items=list(low_stock_items),
        revenue_by_payment_method=revenue_by_payment_method(orders),
        summary_metrics=SummaryMetrics(
            total_revenue=total_revenue,
            total_orders=len(orders),
            total_customers=len({order.customer_id for order in orders}),
            total_capital=total_capital,
            profit_margin=profit_margin(total_revenue, total_capital),
        ),
        money_breakdown=MoneyBreakdown(
            revenue=total_revenue,
            capital=total_capital,
            profit=total_revenue - total_capital,
        ),
    )


def order_status_distribution(orders: Iterable[OrderRow]) -> list[StatusCount]:
    counts: dict[str, int] = {}
    for order in orders:
        if order.status:
            counts[order.status] = counts.get(order.status, 0) + 1
    return [StatusCount(status=status, count=count) for status, count in counts.items()]


def revenue_by_payment_method(orders: Iterable[OrderRow]) -> list[PaymentMethodRevenue]:
    totals: dict[str, float] = {}
    for order in orders:
        if order.status in SETTLED_STATUSES:
            totals[order.payment_method] = totals.get(order.payment_method, 0) + order.total_amount
    return [
        PaymentMethodRevenue(payment_method=method, total_amount=amount)
        for method, amount in totals.items()
    ]


def calculate_total_capital(
    order_items: Iterable[OrderItemRow],
    item_prices: Sequence[ItemPriceRow],
) -> float:
    total = 0.0
    for order_item in order_items:
        if order_item.created_at is None:
            continue
        price = _price_at(order_item, item_prices)
        if price is not None:
            total += price.base_price * order_item.quantity
    return total


def profit_margin(revenue: float, capital: float) -> float:
    """Percentage of revenue left after capital; zero without revenue."""
    if revenue <= 0:
        return 0.0
    return (revenue - capital) / revenue * 100


def _price_at(order_item: OrderItemRow, item_prices: Sequence[ItemPriceRow]) -> ItemPriceRow | None:
    sold_at = order_item.created_at
    for price in item_prices:
        if price.item_id != order_item.item_id or price.effective_from is None:
            continue
        if price.effective_from <= sold_at and (
            price.effective_until is None or price.effective_until > sold_at
        ):
            return price
    return None


__all__ = [
    "SETTLED_STATUSES",
    "build_analytics",
    "calculate_total_capital",
    "order_status_distribution",
    "profit_margin",
    "revenue_by_payment_method",
]
