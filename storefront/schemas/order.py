# storefront/schemas/order.py
from typing import Literal

from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field

from storefront.core.notifications import Notification

PaymentMethod = Literal["whatsapp", "cash_on_delivery", "mobile_money"]


class ShippingRate(SQLModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: str | None = None
    rate: float = Field(ge=0)


class CheckoutRequest(SQLModel):
    """
    Customer details submitted at checkout.

    Validated before anything is sent to Supabase.
    """

    model_config = ConfigDict(extra="forbid")

    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    phone: str = Field(max_length=30)
    email: EmailStr | None = None
    address: str
    city: str
    district: str
    shipping_rate_id: str | None = None
    payment_method: PaymentMethod = "whatsapp"
    notes: str = ""

    @field_validator("first_name", "last_name", "phone", "address", "city", "district")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v: str | None) -> str | None:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class OrderConfirmation(SQLModel):
    """
    Result of a successful checkout.
    """

    order_id: str
    order_number: str
    subtotal: float
    shipping_fee: float
    total: float
    whatsapp_chat_url: str
    notifications: list[Notification] = Field(default_factory=list)
