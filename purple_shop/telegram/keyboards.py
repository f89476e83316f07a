"""Inline keyboards sent by a project's shop bot."""

from __future__ import annotations

from typing import Final

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, WebAppInfo

CALLBACK_CATALOG: Final[str] = "catalog"
CALLBACK_ORDERS: Final[str] = "orders"
CALLBACK_HELP: Final[str] = "help"


def mini_app_url(project_id: str, site_url: str) -> str:
    """Storefront page Telegram opens inside the Mini-App webview."""
    return f"{site_url.rstrip('/')}/app/{project_id}"


def mini_app_button(url: str, text: str = "🚀 Launch Mini App") -> InlineKeyboardButton:
    return InlineKeyboardButton(text, web_app=WebAppInfo(url=url))


def main_menu_keyboard(url: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [mini_app_button(url)],
            [InlineKeyboardButton("🛍️ Browse Catalog", callback_data=CALLBACK_CATALOG)],
            [InlineKeyboardButton("📦 My Orders", callback_data=CALLBACK_ORDERS)],
            [InlineKeyboardButton("❓ Help", callback_data=CALLBACK_HELP)],
        ]
    )


def launch_keyboard(url: str, project_name: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([[mini_app_button(url, f"🛍️ Open {project_name}")]])


def help_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([[InlineKeyboardButton("🆘 Help", callback_data=CALLBACK_HELP)]])


__all__ = [
    "CALLBACK_CATALOG",
    "CALLBACK_HELP",
    "CALLBACK_ORDERS",
    "help_keyboard",
    "launch_keyboard",
    "main_menu_keyboard",
    "mini_app_button",
    "mini_app_url",
]
