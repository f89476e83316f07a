"""
Signed initData fixtures for running the Mini-App outside Telegram.

The payloads produced here pass :func:`validate_init_data` when checked with
the same bot token, which makes them usable for localhost development and for
tests.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, Final, Literal, Mapping
from urllib.parse import quote, urlencode

from purple_shop.models.telegram_user import TelegramUser
from purple_shop.telegram.init_data import build_data_check_string, compute_init_data_hash

MOCK_BOT_TOKEN: Final[str] = "mock_token_for_development"

ColorScheme = Literal["light", "dark"]

MOCK_USERS: Final[dict[str, TelegramUser]] = {
    "john": TelegramUser(
        id=123456789,
        first_name="John",
        last_name="Doe",
        username="johndoe",
        language_code="en",
        is_premium=False,
    ),
    "jane": TelegramUser(
        id=987654321,
        first_name="Jane",
        last_name="Smith",
        username="janesmith",
        language_code="en",
        is_premium=True,
    ),
    "premium_user": TelegramUser(
        id=555666777,
        first_name="Premium",
        last_name="User",
        username="premiumuser",
        language_code="en",
        is_premium=True,
    ),
}

_LIGHT_THEME: Final[dict[str, str]] = {
    "bg_color": "#ffffff",
    "text_color": "#000000",
    "hint_color": "#999999",
    "link_color": "#2481cc",
    "button_color": "#2481cc",
    "button_text_color": "#ffffff",
    "secondary_bg_color": "#f1f1f1",
}

_DARK_THEME: Final[dict[str, str]] = {
    "bg_color": "#212121",
    "text_color": "#ffffff",
    "hint_color": "#aaaaaa",
    "link_color": "#8774e1",
    "button_color": "#8774e1",
    "button_text_color": "#ffffff",
    "secondary_bg_color": "#181818",
}


@dataclass(frozen=True)
class MockInitData:
    raw: str
    user_data: dict[str, Any]
    auth_date: int
    hash: str


def generate_mock_init_data(
    user: TelegramUser | Mapping[str, Any],
    bot_token: str | None = None,
    *,
    now: float | None = None,
) -> MockInitData:
    """Build a signed initData query string for ``user``.

    ``None`` fields are dropped from the user JSON. Without ``bot_token`` the
    payload is signed with :data:`MOCK_BOT_TOKEN`.
    """
    timestamp = time.time() if now is None else now
    auth_date = int(timestamp)

    if isinstance(user, TelegramUser):
        user_data = user.model_dump(exclude_none=True)
    else:
        user_data = {key: value for key, value in user.items() if value is not None}

    params: dict[str, str] = {
        "user": json.dumps(user_data, separators=(",", ":"), ensure_ascii=False),
        "auth_date": str(auth_date),
        "start_param": "debug_mode",
        "chat_type": "sender",
        "chat_instance": str(int(timestamp * 1000)),
    }

    data_check_string = build_data_check_string(params.items())
    hash_value = compute_init_data_hash(data_check_string, bot_token or MOCK_BOT_TOKEN)
    params["hash"] = hash_value

    return MockInitData(
        raw=urlencode(params),
        user_data=user_data,
        auth_date=auth_date,
        hash=hash_value,
    )


def create_mock_telegram_url(
    project_id: str,
    user: TelegramUser | Mapping[str, Any],
    base_url: str = "http://localhost:3000",
    bot_token: str | None = None,
) -> str:
    """Return a storefront URL carrying mock initData in the ``initData`` parameter."""
    mock = generate_mock_init_data(user, bot_token)
    return f"{base_url}/app/{project_id}?initData={quote(mock.raw, safe='')}"


def generate_mock_theme_params(color_scheme: ColorScheme = "light") -> dict[str, str]:
    theme = _LIGHT_THEME if color_scheme == "light" else _DARK_THEME
    return dict(theme)


def generate_mock_launch_params(
    user: TelegramUser | Mapping[str, Any],
    color_scheme: ColorScheme = "light",
    bot_token: str | None = None,
) -> dict[str, str]:
    """Return the ``tgWebApp*`` launch parameters a Telegram client would inject."""
    init_data = generate_mock_init_data(user, bot_token)
    theme_params = generate_mock_theme_params(color_scheme)

    return {
        "tgWebAppVersion": "7.0",
        "tgWebAppData": init_data.raw,
        "tgWebAppPlatform": "web",
        "tgWebAppThemeParams": json.dumps(theme_params, separators=(",", ":")),
        "tgWebAppStartParam": "debug_mode",
        "tgWebAppShowSettings": "false",
        "tgWebAppBotInline": "false",
        "tgWebAppFullscreen": "false",
    }


__all__ = [
    "MOCK_BOT_TOKEN",
    "MOCK_USERS",
    "MockInitData",
    "create_mock_telegram_url",
    "generate_mock_init_data",
    "generate_mock_launch_params",
    "generate_mock_theme_params",
]
