"""Public exports for Pydantic schemas."""

from __future__ import annotations

from .analytics import (
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
from .telegram_auth import ProjectSummary, TelegramValidationResult, ValidateTelegramUserRequest

__all__ = [
    "AnalyticsData",
    "ItemPriceRow",
    "LowStockItemRow",
    "MoneyBreakdown",
    "OrderItemRow",
    "OrderRow",
    "PaymentMethodRevenue",
    "PopularItemRow",
    "ProjectSummary",
    "RevenuePoint",
    "StatusCount",
    "SummaryMetrics",
    "TelegramValidationResult",
    "ValidateTelegramUserRequest",
]
