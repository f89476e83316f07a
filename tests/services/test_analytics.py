from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from purple_shop.schemas.analytics import (
    ItemPriceRow,
    LowStockItemRow,
    OrderItemRow,
    OrderRow,
    PopularItemRow,
)
from purple_shop.services.analytics import (
    build_analytics,
    calculate_total_capital,
    profit_margin,
)

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _order(
    order_id: str,
    amount: float,
    status: str | None,
    method: str = "cash",
    customer: str | None = "c1",
) -> OrderRow:
    return OrderRow(
        id=order_id,
        created_at=T0 + timedelta(days=int(order_id[1:])),
        total_amount=amount,
        status=status,
        payment_method=method,
        customer_id=customer,
    )


@pytest.fixture()
def orders() -> list[OrderRow]:
    return [
        _order("o1", 100.0, "paid", "cash", "c1"),
        _order("o2", 50.0, "pending", "kbzpay", "c2"),
        _order("o3", 30.0, "done", "kbzpay", "c1"),
        _order("o4", 20.0, None, "cash", None),
    ]


@pytest.fixture()
def item_prices() -> list[ItemPriceRow]:
    return [
        ItemPriceRow(
            item_id="i1",
            base_price=10.0,
            effective_from=T0,
            effective_until=T0 + timedelta(days=10),
        ),
        ItemPriceRow(item_id="i1", base_price=12.0, effective_from=T0 + timedelta(days=10)),
        ItemPriceRow(item_id="i2", base_price=5.0, effective_from=T0),
    ]


def test_build_analytics_summary(orders: list[OrderRow], item_prices: list[ItemPriceRow]) -> None:
    order_items = [
        OrderItemRow(item_id="i1", quantity=2, created_at=T0 + timedelta(days=1)),
        OrderItemRow(item_id="i1", quantity=1, created_at=T0 + timedelta(days=11)),
        OrderItemRow(item_id="i2", quantity=4, created_at=T0 + timedelta(days=2)),
    ]

    data = build_analytics(orders=orders, order_items=order_items, item_prices=item_prices)

    assert data.summary_metrics.total_revenue == pytest.approx(200.0)
    assert data.summary_metrics.total_orders == 4
    assert data.summary_metrics.total_customers == 3
    assert data.summary_metrics.total_capital == pytest.approx(52.0)
    assert data.summary_metrics.profit_margin == pytest.approx(74.0)
    assert data.money_breakdown.revenue == pytest.approx(200.0)
    assert data.money_breakdown.capital == pytest.approx(52.0)
    assert data.money_breakdown.profit == pytest.approx(148.0)


def test_revenue_points_follow_input_order(orders: list[OrderRow]) -> None:
    data = build_analytics(orders=orders, order_items=[], item_prices=[])

    assert [point.total_amount for point in data.revenue_and_orders] == [100.0, 50.0, 30.0, 20.0]
    assert data.revenue_and_orders[0].created_at == orders[0].created_at


def test_status_distribution_skips_empty_status(orders: list[OrderRow]) -> None:
    data = build_analytics(orders=orders, order_items=[], item_prices=[])

    assert [(s.status, s.count) for s in data.order_status_distribution] == [
        ("paid", 1),
        ("pending", 1),
        ("done", 1),
    ]


def test_payment_method_revenue_counts_settled_orders_only(orders: list[OrderRow]) -> None:
    data = build_analytics(orders=orders, order_items=[], item_prices=[])

    assert [(r.payment_method, r.total_amount) for r in data.revenue_by_payment_method] == [
        ("cash", 100.0),
        ("kbzpay", 30.0),
    ]


def test_capital_ignores_unpriced_and_undated_items(item_prices: list[ItemPriceRow]) -> None:
    order_items = [
        OrderItemRow(item_id="i1", quantity=3, created_at=None),
        OrderItemRow(item_id="unknown", quantity=1, created_at=T0 + timedelta(days=1)),
        OrderItemRow(item_id="i2", quantity=1, created_at=T0 - timedelta(days=1)),
        OrderItemRow(item_id="i2", quantity=2, created_at=T0 + timedelta(days=1)),
    ]

    assert calculate_total_capital(order_items, item_prices) == pytest.approx(10.0)


def test_price_window_end_is_exclusive(item_prices: list[ItemPriceRow]) -> None:
    order_items = [OrderItemRow(item_id="i1", quantity=1, created_at=T0 + timedelta(days=10))]

    assert calculate_total_capital(order_items, item_prices) == pytest.approx(12.0)


def test_popular_and_low_stock_items_pass_through() -> None:
    popular = [PopularItemRow(name="Longyi", total_sold=12)]
    low_stock = [LowStockItemRow(name="Thanaka", stock_quantity=1, min_stock_level=5)]

    data = build_analytics(
        orders=[],
        order_items=[],
        item_prices=[],
        popular_items=popular,
        low_stock_items=low_stock,
    )

    assert data.popular_items == popular
    assert data.low_stock_items == low_stock


def test_empty_inputs_produce_zeroes() -> None:
    data = build_analytics(orders=[], order_items=[], item_prices=[])

    assert data.summary_metrics.total_revenue == 0
    assert data.summary_metrics.total_customers == 0
    assert data.summary_metrics.profit_margin == 0
    assert data.order_status_distribution == []
    assert data.revenue_by_payment_method == []


@pytest.mark.parametrize(
    ("revenue", "capital", "expected"),
    [(200.0, 50.0, 75.0), (100.0, 150.0, -50.0), (0.0, 10.0, 0.0), (-5.0, 0.0, 0.0)],
)
def test_profit_margin(revenue: float, capital: float, expected: float) -> None:
    assert profit_margin(revenue, capital) == pytest.approx(expected)


def test_naive_and_aware_timestamps_are_comparable() -> None:
    naive_start = datetime(2024, 1, 1)
    prices = [ItemPriceRow(item_id="tea", base_price=3.0, effective_from=naive_start)]
    sold = [OrderItemRow(item_id="tea", quantity=2, created_at=T0 + timedelta(hours=1))]

    assert calculate_total_capital(sold, prices) == 6.0
    assert prices[0].effective_from == T0


def test_naive_order_item_time_is_read_as_utc() -> None:
    prices = [
        ItemPriceRow(
            item_id="tea",
            base_price=3.0,
            effective_from=T0,
            effective_until=T0 + timedelta(days=1),
        )
    ]
    sold = [OrderItemRow(item_id="tea", quantity=1, created_at=datetime(2024, 1, 1, 12))]

    assert calculate_total_capital(sold, prices) == 3.0
    assert sold[0].created_at is not None
    assert sold[0].created_at.tzinfo is timezone.utc
