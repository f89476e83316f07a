"""Telegram Mini-App initData validation."""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import Final
from urllib.parse import parse_qsl, unquote

from pydantic import BaseModel, ConfigDict, ValidationError

from purple_shop.core.logging import get_logger
from purple_shop.models.telegram_user import TelegramUser

logger = get_logger(__name__)

WEB_APP_DATA_KEY: Final[bytes] = b"WebAppData"
DEFAULT_MAX_AGE_SECONDS: Final[int] = 24 * 60 * 60


class InitDataFailure(StrEnum):
    """Reasons an initData payload is rejected."""

    NO_HASH = "NO_HASH"
    HASH_MISMATCH = "HASH_MISMATCH"
    EXPIRED = "EXPIRED"


_FAILURE_MESSAGES: Final[dict[InitDataFailure, str]] = {
    InitDataFailure.NO_HASH: "No hash found in initData",
    InitDataFailure.HASH_MISMATCH: "Hash validation failed",
    InitDataFailure.EXPIRED: "initData is too old (more than {max_age})",
}


class InitDataValidationResult(BaseModel):
    """Outcome of :func:`validate_init_data`.

    A valid result carries the optional user and auth date; an invalid one
    carries the failure reason and never any user data.
    """

    is_valid: bool
    user: TelegramUser | None = None
    auth_date: int | None = None
    reason: InitDataFailure | None = None
    error: str | None = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def valid(cls, *, user: TelegramUser | None, auth_date: int | None) -> InitDataValidationResult:
        return cls(is_valid=True, user=user, auth_date=auth_date)

    @classmethod
    def invalid(
        cls,
        reason: InitDataFailure,
        *,
        max_age_seconds: int = DEFAULT_MAX_AGE_SECONDS,
    ) -> InitDataValidationResult:
        message = _FAILURE_MESSAGES[reason].format(max_age=_describe_age(max_age_seconds))
        return cls(is_valid=False, reason=reason, error=message)


def validate_init_data(
    init_data_raw: str,
    bot_token: str,
    *,
    max_age_seconds: int = DEFAULT_MAX_AGE_SECONDS,
    now: int | None = None,
) -> InitDataValidationResult:
    """Verify the signature and freshness of a Telegram initData string.

    The signature is HMAC-SHA256 over the sorted ``key=value`` lines of every
    field except ``hash``, keyed with HMAC-SHA256("WebAppData", bot_token).
    The hash is checked before ``auth_date``, so a payload that is both forged
    and stale reports ``HASH_MISMATCH``.

    Raises:
        ValueError: if ``bot_token`` is empty.
    """
    if not bot_token:
        raise ValueError("bot_token must not be empty")

    pairs = parse_qsl(init_data_raw, keep_blank_values=True)
    received_hash = _first_value(pairs, "hash")
    if not received_hash:
        logger.info("initData rejected: missing hash")
        return InitDataValidationResult.invalid(InitDataFailure.NO_HASH)

    data_check_string = build_data_check_string((k, v) for k, v in pairs if k != "hash")
    calculated_hash = compute_init_data_hash(data_check_string, bot_token)

    if not hmac.compare_digest(calculated_hash.encode("ascii"), received_hash.encode("utf-8")):
        logger.info("initData rejected: hash mismatch")
        return InitDataValidationResult.invalid(InitDataFailure.HASH_MISMATCH)

    user = _parse_user(_first_value(pairs, "user"))
    auth_date = _parse_auth_date(_first_value(pairs, "auth_date"))

    if auth_date:
        current = int(time.time()) if now is None else now
        if current - auth_date > max_age_seconds:
            logger.info(
                "initData rejected: expired",
                extra={"auth_date": auth_date, "age_seconds": current - auth_date},
            )
            return InitDataValidationResult.invalid(
                InitDataFailure.EXPIRED, max_age_seconds=max_age_seconds
            )

    return InitDataValidationResult.valid(user=user, auth_date=auth_date)


def build_data_check_string(pairs: Iterable[tuple[str, str]]) -> str:
    """Join ``key=value`` lines in ascending order with newlines."""
    return "\n".join(sorted(f"{key}={value}" for key, value in pairs))


def compute_init_data_hash(data_check_string: str, bot_token: str) -> str:
    """Return the lowercase hex signature Telegram expects for the data-check string."""
    secret_key = hmac.new(
        key=WEB_APP_DATA_KEY,
        msg=bot_token.encode("utf-8"),
        digestmod=hashlib.sha256,
    ).digest()
    return hmac.new(
        key=secret_key,
        msg=data_check_string.encode("utf-8"),
        digestmod=hashlib.sha256,
    ).hexdigest()


def extract_init_data(query_params: Mapping[str, str | list[str] | None]) -> str | None:
    """Return the ``initData`` query parameter when it is a single string."""
    init_data = query_params.get("initData")
    if isinstance(init_data, str):
        return init_data
    return None


def _first_value(pairs: list[tuple[str, str]], key: str) -> str | None:
    for name, value in pairs:
        if name == key:
            return value
    return None


def _parse_user(user_param: str | None) -> TelegramUser | None:
    # Launch contexts such as inline queries ship no user; that is not an error.
    if not user_param:
        return None
    try:
        payload = _load_user_json(user_param)
        return TelegramUser.model_validate(payload)
    except (json.JSONDecodeError, ValidationError) as exc:
        logger.warning("Failed to parse user data from initData: %s", exc)
        return None


def _load_user_json(user_param: str) -> object:
    # Some clients percent-encode the JSON a second time.
    try:
        return json.loads(user_param)
    except json.JSONDecodeError:
        return json.loads(unquote(user_param))


def _describe_age(seconds: int) -> str:
    if seconds % 3600:
        return f"{seconds} seconds"
    hours = seconds // 3600
    return "1 hour" if hours == 1 else f"{hours} hours"


def _parse_auth_date(auth_date_param: str | None) -> int | None:
    if not auth_date_param:
        return None
    try:
        return int(auth_date_param) or None
    except ValueError:
        logger.warning("Ignoring non-integer auth_date in initData: %r", auth_date_param)
        return None


__all__ = [
    "DEFAULT_MAX_AGE_SECONDS",
    "InitDataFailure",
    "InitDataValidationResult",
    "build_data_check_string",
    "compute_init_data_hash",
    "extract_init_data",
    "validate_init_data",
]
