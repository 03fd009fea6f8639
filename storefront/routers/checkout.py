# storefront/routers/checkout.py
from fastapi import APIRouter, Depends

from storefront.dependencies import get_checkout_service
from storefront.schemas.order import CheckoutRequest, OrderConfirmation, ShippingRate
from storefront.services.checkout_service import CheckoutService

router = APIRouter(prefix="/checkout", tags=["Checkout"])


@router.get("/shipping-rates", response_model=list[ShippingRate])
def list_shipping_rates(service: CheckoutService = Depends(get_checkout_service)):
    """
    Shipping options, cheapest first.
    """
    return service.list_shipping_rates()


@router.post("", response_model=OrderConfirmation)
def place_order(
    payload: CheckoutRequest,
    service: CheckoutService = Depends(get_checkout_service),
):
    """
    Place an order for the current cart.

    On success the cart is cleared, its items are added to the recent
    products, and the WhatsApp chat URL for the order is returned.
    """
    return service.place_order(payload)
