"""Per-project shop bot built on python-telegram-bot and fed by webhook updates."""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import re
from typing import Any, Final, Sequence, TypeAlias

from telegram import InlineKeyboardMarkup, Update
from telegram.constants import ParseMode
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from purple_shop.core.logging import get_logger
from purple_shop.telegram.keyboards import (
    CALLBACK_CATALOG,
    CALLBACK_HELP,
    CALLBACK_ORDERS,
    help_keyboard,
    launch_keyboard,
    main_menu_keyboard,
)

BotApplication: TypeAlias = Application[Any, Any, Any, Any, Any, Any]

WEBHOOK_SECRET_KEY: Final[bytes] = b"purple-shop-webhook"

COMMANDS_TEXT: Final[str] = (
    "Available commands:\n"
    "/start - Welcome message and main menu\n"
    "/launch - Open the mini app\n"
    "/catalog - Browse our product catalog\n"
    "/orders - View your order history\n"
    "/help - Show this help message"
)
HELP_TEXT: Final[str] = (
    f"🆘 Help & Support\n\n{COMMANDS_TEXT}\n\n"
    "🚀 Launch Mini App button - Opens our mobile shopping app\n"
    "You can also send me messages and I'll assist you with your shopping needs!\n\n"
    "For support, contact our team directly."
)
CATALOG_TEXT: Final[str] = "🛍️ Product catalog feature coming soon! Stay tuned."
ORDERS_TEXT: Final[str] = "📦 Order history feature coming soon! Stay tuned."

_CALLBACK_TEXTS: Final[dict[str, str]] = {
    CALLBACK_CATALOG: CATALOG_TEXT,
    CALLBACK_ORDERS: ORDERS_TEXT,
    CALLBACK_HELP: f"🆘 Help & Support\n\n{COMMANDS_TEXT}",
}

_WORD = re.compile(r"[^\W\d_]+")


def webhook_secret(bot_token: str) -> str:
    """Value Telegram echoes in ``X-Telegram-Bot-Api-Secret-Token`` for this bot."""
    return hmac.new(WEBHOOK_SECRET_KEY, bot_token.encode("utf-8"), hashlib.sha256).hexdigest()


def welcome_text(project_name: str, first_name: str) -> str:
    return (
        f"🌟 Welcome to {project_name}! 🌟\n\n"
        f"Hello {first_name}! I'm your shopping assistant.\n\n"
        "Here are some things I can help you with:\n"
        "• Browse our product catalog\n"
        "• Add items to cart\n"
        "• Place orders directly through chat\n"
        "• Check order status\n"
        "• Get help and support\n\n"
        "Use /catalog to start browsing our products!"
    )


def reply_for_text(text: str, project_name: str) -> tuple[str, InlineKeyboardMarkup | None]:
    """Pick the canned answer for a free-text message."""
    lowered = text.lower()
    words = set(_WORD.findall(lowered))
    if words & {"hello", "hi"}:
        return f"Hello! Welcome to {project_name}. How can I help you today?", None
    if "catalog" in lowered or "product" in lowered:
        return (
            "🛍️ Product catalog feature is coming soon! "
            "Use /catalog to browse when available.",
            None,
        )
    if "order" in lowered:
        return (
            "📦 Order management feature is coming soon! "
            "Use /orders to check your orders when available.",
            None,
        )
    return (
        f'I understand you said: "{text}"\n\n'
        "I'm still learning! For now, please use the commands above "
        "or type /help for assistance.",
        help_keyboard(),
    )


class ProjectBot:
    """One project's bot: handlers bound to its name and Mini-App URL."""

    def __init__(
        self,
        *,
        project_id: str,
        project_name: str,
        token: str,
        mini_app_url: str,
        allowed_updates: Sequence[str] | None = None,
    ) -> None:
        self.project_id = project_id
        self.project_name = project_name
        self.token = token
        self.mini_app_url = mini_app_url
        self.allowed_updates: tuple[str, ...] = tuple(
            allowed_updates or ("message", "callback_query")
        )
        self._application: BotApplication = ApplicationBuilder().token(token).build()
        self._lifecycle_lock = asyncio.Lock()
        self._started = False
        self._logger = get_logger("purple_shop.telegram.bot")

        self._register_handlers()

    @property
    def application(self) -> BotApplication:
        return self._application

    @property
    def secret_token(self) -> str:
        return webhook_secret(self.token)

    async def ensure_started(self) -> None:
        async with self._lifecycle_lock:
            if self._started:
                return
            await self._application.initialize()
            await self._application.start()
            self._started = True
            self._logger.info("Shop bot started", extra={"project_id": self.project_id})

    async def shutdown(self) -> None:
        async with self._lifecycle_lock:
            if not self._started:
                return
            await self._application.stop()
            await self._application.shutdown()
            self._started = False
            self._logger.info("Shop bot stopped", extra={"project_id": self.project_id})

    async def process_payload(self, payload: dict[str, Any]) -> None:
        """Decode a webhook update and run it through the handlers."""
        await self.ensure_started()
        update = Update.de_json(payload, self._application.bot)
        await self._application.process_update(update)

    def _register_handlers(self) -> None:
        commands = {
            "start": self._handle_start,
            "help": self._handle_help,
            "launch": self._handle_launch,
            "catalog": self._handle_catalog,
            "orders": self._handle_orders,
        }
        for command, callback in commands.items():
            self._application.add_handler(CommandHandler(command, callback))
        self._application.add_handler(CallbackQueryHandler(self._handle_callback_query))
        self._application.add_handler(
            MessageHandler(filters.TEXT & ~filters.COMMAND, self._handle_text)
        )
        self._application.add_error_handler(self._handle_error)

    async def _handle_start(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.effective_message
        user = update.effective_user
        if message is None or user is None:
            return
        await message.reply_text(
            welcome_text(self.project_name, user.first_name),
            reply_markup=main_menu_keyboard(self.mini_app_url),
        )

    async def _handle_help(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if update.effective_message is not None:
            await update.effective_message.reply_text(HELP_TEXT)

    async def _handle_launch(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if update.effective_message is None:
            return
        await update.effective_message.reply_text(
            "🚀 *Launch Mini App*\n\nClick the button below to open our mobile shopping app:",
            reply_markup=launch_keyboard(self.mini_app_url, self.project_name),
            parse_mode=ParseMode.MARKDOWN,
        )

    async def _handle_catalog(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if update.effective_message is not None:
            await update.effective_message.reply_text(CATALOG_TEXT)

    async def _handle_orders(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if update.effective_message is not None:
            await update.effective_message.reply_text(ORDERS_TEXT)

    async def _handle_callback_query(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        query = update.callback_query
        if query is None:
            return
        text = _CALLBACK_TEXTS.get(query.data or "")
        if text is None:
            await query.answer("Unknown action")
            return
        await query.edit_message_text(text)
        await query.answer()

    async def _handle_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.effective_message
        if message is None or not message.text:
            return
        text, keyboard = reply_for_text(message.text, self.project_name)
        await message.reply_text(text, reply_markup=keyboard)

    async def _handle_error(self, update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        self._logger.error(
            "Shop bot handler failed",
            exc_info=context.error,
            extra={"project_id": self.project_id},
        )


__all__ = [
    "HELP_TEXT",
    "ProjectBot",
    "reply_for_text",
    "webhook_secret",
    "welcome_text",
]
