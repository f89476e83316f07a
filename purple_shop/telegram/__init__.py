"""Telegram Mini-App helpers: initData validation and development fixtures."""

from purple_shop.telegram.init_data import (
    InitDataFailure,
    InitDataValidationResult,
    extract_init_data,
    validate_init_data,
)

__all__ = [
    "InitDataFailure",
    "InitDataValidationResult",
    "extract_init_data",
    "validate_init_data",
]
