# storefront/services/checkout_service.py
import logging
from urllib.parse import quote

from fastapi import HTTPException, status
from supabase import Client

from storefront.core.notifications import Notifier
from storefront.repositories.order_repo import OrderRepository
from storefront.schemas.cart import CartItem
from storefront.schemas.order import CheckoutRequest, OrderConfirmation, ShippingRate
from storefront.services.cart_service import CartService

logger = logging.getLogger(__name__)


def format_price(amount: float, currency: str = "UGX") -> str:
    return f"{currency} {amount:,.0f}"


def build_whatsapp_message(
    payload: CheckoutRequest,
    items: list[CartItem],
    subtotal: float,
    rate: ShippingRate | None,
    currency: str = "UGX",
) -> str:
    """
    Plain-text order summary sent to the shop over WhatsApp.
    """
    shipping_fee = rate.rate if rate else 0.0
    lines = [
        "Hi! I'd like to place an order:",
        "",
        "*Customer Details:*",
        f"Name: {payload.first_name} {payload.last_name}",
        f"Phone: {payload.phone}",
    ]
    if payload.email:
        lines.append(f"Email: {payload.email}")
    lines += [
        f"Address: {payload.address}, {payload.city}, {payload.district}",
        "",
        "*Order Items:*",
    ]
    lines += [
        f"{item.name} x{item.quantity} - {format_price(item.price * item.quantity, currency)}"
        for item in items
    ]
    lines += [
        "",
        "*Order Summary:*",
        f"Subtotal: {format_price(subtotal, currency)}",
        f"Shipping ({rate.name if rate else 'n/a'}): {format_price(shipping_fee, currency)}",
        f"Total: {format_price(subtotal + shipping_fee, currency)}",
    ]
    if payload.notes:
        lines += ["", f"Notes: {payload.notes}"]
    lines += ["", "Please confirm this order. Thank you!"]
    return "\n".join(lines)


class CheckoutService:
    """
    Turns the client's cart into a Supabase order.

    Steps:
      1. Reject an empty cart before any network call.
      2. Resolve the shipping rate (explicit id or the cheapest).
      3. Insert customer, get an order number, insert order + items.
      4. Record the items as recent products and clear the cart.

    Any Supabase failure in step 3 leaves the cart untouched.
    """

    def __init__(
        self,
        repo: OrderRepository,
        client: Client,
        cart: CartService,
        notifier: Notifier,
        whatsapp_number: str,
        currency: str = "UGX",
    ):
        self.repo = repo
        self.client = client
        self.cart = cart
        self.notifier = notifier
        self.whatsapp_number = whatsapp_number
        self.currency = currency

    def list_shipping_rates(self) -> list[ShippingRate]:
        try:
            rows = self.repo.list_shipping_rates(self.client)
            return [ShippingRate.model_validate(row) for row in rows]
        except Exception as e:
            logger.error(f"Error fetching shipping rates: {e}")
            self.notifier.error("Failed to load shipping options")
            return []

    def _resolve_rate(self, rate_id: str | None) -> ShippingRate | None:
        rates = self.list_shipping_rates()
        if rate_id is None:
            return rates[0] if rates else None

        for rate in rates:
            if rate.id == rate_id:
                return rate
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unknown shipping option",
        )

    def place_order(self, payload: CheckoutRequest) -> OrderConfirmation:
        items = self.cart.items
        if not items:
            self.notifier.error("Your cart is empty")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cart is empty",
            )

        subtotal = self.cart.total
        rate = self._resolve_rate(payload.shipping_rate_id)
        shipping_fee = rate.rate if rate else 0.0
        total = subtotal + shipping_fee

        message = build_whatsapp_message(payload, items, subtotal, rate, self.currency)
        encoded = quote(message, safe="!~*'()")
        whatsapp_url = f"https://wa.me/{self.whatsapp_number}?text={encoded}"

        try:
            customer = self.repo.create_customer(
                self.client,
                {
                    "first_name": payload.first_name,
                    "last_name": payload.last_name,
                    "phone": payload.phone,
                    "email": payload.email,
                    "address": payload.address,
                    "city": payload.city,
                    "district": payload.district,
                },
            )
            order_number = self.repo.generate_order_number(self.client)
            order = self.repo.create_order(
                self.client,
                {
                    "order_number": order_number,
                    "customer_id": customer["id"],
                    "subtotal": subtotal,
                    "shipping_fee": shipping_fee,
                    "total": total,
                    "status": "pending",
                    "payment_method": payload.payment_method,
                    "notes": payload.notes,
                    "whatsapp_chat_url": whatsapp_url,
                },
            )
            self.repo.create_items(
                self.client,
                [
                    {
                        "order_id": order["id"],
                        "product_id": item.id,
                        "quantity": item.quantity,
                        "unit_price": item.price,
                        "total_price": item.price * item.quantity,
                    }
                    for item in items
                ],
            )
        except Exception as e:
            logger.error(f"Order creation error: {e}")
            self.notifier.error("Failed to place order. Please try again.")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Failed to place order. Please try again.",
            )

        self.cart.add_to_recent_products(items)
        self.cart.clear_cart()
        self.notifier.notify(
            "Order placed successfully!",
            "You'll be redirected to WhatsApp to complete your order.",
        )

        return OrderConfirmation(
            order_id=str(order["id"]),
            order_number=order_number,
            subtotal=subtotal,
            shipping_fee=shipping_fee,
            total=total,
            whatsapp_chat_url=whatsapp_url,
            notifications=self.notifier.drain(),
        )
