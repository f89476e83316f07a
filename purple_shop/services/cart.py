"""
Storefront cart state.

The cart is an explicit object owned by whoever serves the customer. Its
persistence goes through a ``CartStorage`` port so the same logic works with
browser storage, a cache, or plain memory in tests.
"""

from __future__ import annotations

from typing import Final, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from purple_shop.core.logging import get_logger

logger = get_logger(__name__)

CART_STORAGE_KEY: Final[str] = "purple-shopping-cart"


class CartProduct(BaseModel):
    """Product snapshot taken when the customer adds it to the cart."""

    id: str
    name: str
    current_price: float = Field(ge=0)
    original_price: float | None = None
    stock_quantity: int = Field(ge=0)
    first_image_url: str | None = None


class CartItem(CartProduct):
    quantity: int = Field(ge=0)


class CartSnapshot(BaseModel):
    """Serialized cart contents written to storage."""

    items: list[CartItem] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


class CartStorage(Protocol):
    """Key/value port used to persist cart snapshots."""

    def load(self, key: str) -> str | None: ...

    def save(self, key: str, payload: str) -> None: ...


class InMemoryCartStorage:
    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def load(self, key: str) -> str | None:
        return self._data.get(key)

    def save(self, key: str, payload: str) -> None:
        self._data[key] = payload


class Cart:
    """Cart whose quantities are always clamped to the product's stock."""

    def __init__(
        self,
        storage: CartStorage | None = None,
        *,
        storage_key: str = CART_STORAGE_KEY,
    ) -> None:
        self._storage = storage
        self._storage_key = storage_key
        self._items: list[CartItem] = self._hydrate()

    @property
    def items(self) -> list[CartItem]:
        return [item.model_copy() for item in self._items]

    def add_item(self, product: CartProduct) -> None:
        """Add one unit of ``product``; repeated adds stop at the stock level."""
        existing = self._find(product.id)
        if existing is None:
            self._items.append(CartItem(**product.model_dump(), quantity=1))
        else:
            existing.quantity = min(existing.quantity + 1, product.stock_quantity)
        self._persist()

    def update_quantity(self, item_id: str, quantity: int) -> None:
        """Set the quantity for ``item_id``; zero or less removes the item."""
        if quantity <= 0:
            self.remove_item(item_id)
            return

        item = self._find(item_id)
        if item is not None:
            item.quantity = min(quantity, item.stock_quantity)
        self._persist()

    def remove_item(self, item_id: str) -> None:
        self._items = [item for item in self._items if item.id != item_id]
        self._persist()

    def clear(self) -> None:
        self._items = []
        self._persist()

    def get_total(self) -> float:
        return sum(item.current_price * item.quantity for item in self._items)

    def get_total_items(self) -> int:
        return sum(item.quantity for item in self._items)

    def get_item(self, item_id: str) -> CartItem | None:
        item = self._find(item_id)
        return item.model_copy() if item is not None else None

    def _find(self, item_id: str) -> CartItem | None:
        return next((item for item in self._items if item.id == item_id), None)

    def _hydrate(self) -> list[CartItem]:
        if self._storage is None:
            return []
        payload = self._storage.load(self._storage_key)
        if not payload:
            return []
        try:
            return CartSnapshot.model_validate_json(payload).items
        except ValidationError:
            logger.warning("Discarding unreadable cart snapshot", extra={"key": self._storage_key})
            return []

    def _persist(self) -> None:
        if self._storage is None:
            return
        snapshot = CartSnapshot(items=self._items)
        self._storage.save(self._storage_key, snapshot.model_dump_json())


__all__ = [
    "CART_STORAGE_KEY",
    "Cart",
    "CartItem",
    "CartProduct",
    "CartSnapshot",
    "CartStorage",
    "InMemoryCartStorage",
]
