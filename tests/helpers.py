"""Independent initData signing used to check the production code against."""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from collections.abc import Mapping
from urllib.parse import urlencode

TEST_BOT_TOKEN = "700100:SHOP_TEST_TOKEN"

SHOPPER: dict[str, object] = {
    "id": 424242,
    "first_name": "Thida",
    "last_name": "Aung",
    "username": "thida_shops",
}


def sign_pairs(pairs: Mapping[str, str], bot_token: str) -> str:
    check = "\n".join(sorted(f"{key}={value}" for key, value in pairs.items()))
    secret = hmac.new(b"WebAppData", bot_token.encode(), hashlib.sha256).digest()
    return hmac.new(secret, check.encode(), hashlib.sha256).hexdigest()


def generate_init_data(
    bot_token: str = TEST_BOT_TOKEN,
    overrides: Mapping[str, str] | None = None,
    *,
    auth_date: int | None = None,
) -> str:
    """Signed initData for :data:`SHOPPER`; ``overrides`` replace fields before signing."""
    fields = {
        "query_id": "AAHshop-query",
        "user": json.dumps(SHOPPER, separators=(",", ":")),
        "auth_date": str(int(time.time()) if auth_date is None else auth_date),
        **(overrides or {}),
    }
    fields["hash"] = sign_pairs(fields, bot_token)
    return urlencode(fields)
