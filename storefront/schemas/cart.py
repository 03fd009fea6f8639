# storefront/schemas/cart.py
from datetime import datetime, timezone
from typing import Any

from pydantic import ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field

from storefront.core.notifications import Notification


class CartItemCreate(SQLModel):
    """
    Payload for adding a product to the cart.
    Quantity is not part of the payload: every add counts as one unit.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    price: float = Field(ge=0)
    images: list[str] = Field(default_factory=list)

    @field_validator("id", "name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class CartItem(CartItemCreate):
    """
    A line in the cart. Unique by `id` within one cart.
    """

    quantity: int = Field(ge=1, description="Must be >= 1")


class CartItemUpdate(SQLModel):
    """
    Payload for setting a cart line's quantity.

    Zero or negative quantities are accepted and mean "remove".
    """

    quantity: int


class RecentProduct(SQLModel):
    """
    A previously purchased item, used for the "buy again" list.
    """

    id: str
    name: str
    price: float = Field(ge=0)
    images: list[str] = Field(default_factory=list)
    purchased_at: datetime


class LegacyRecentProduct(SQLModel):
    """
    One entry of the old `recentlyPurchased` list.

    Older writers stored either raw cart lines (with `quantity`, no
    timestamp) or recent products with a camelCase `purchasedAt`.
    Entries without a timestamp are stamped with the time they are read.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    price: float = Field(ge=0)
    images: list[str] = Field(default_factory=list)
    purchased_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "purchased_at" not in data and data.get("purchasedAt"):
            data["purchased_at"] = data["purchasedAt"]
        if data.get("images") is None:
            data.pop("images", None)
        return data

    def to_recent_product(self) -> RecentProduct:
        return RecentProduct(
            id=self.id,
            name=self.name,
            price=self.price,
            images=list(self.images),
            purchased_at=self.purchased_at,
        )


class CartSummary(SQLModel):
    """
    Full cart response model with totals and the notifications
    produced by the operation.
    """

    items: list[CartItem]
    total: float
    item_count: int
    notifications: list[Notification] = Field(default_factory=list)


class RecentProductsRead(SQLModel):
    items: list[RecentProduct]
    notifications: list[Notification] = Field(default_factory=list)
