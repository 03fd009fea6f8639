# storefront/routers/cart.py
from fastapi import APIRouter, Depends

from storefront.dependencies import get_cart_service
from storefront.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartSummary,
)
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("", response_model=CartSummary)
def get_my_cart(service: CartService = Depends(get_cart_service)):
    """
    Get the current client's cart with totals.
    """
    return service.summary()


@router.post("", response_model=CartSummary)
def add_to_cart(
    payload: CartItemCreate,
    service: CartService = Depends(get_cart_service),
):
    """
    Add one unit of a product to the cart.

    Returns the updated cart summary.
    """
    service.add_to_cart(payload)
    return service.summary()


@router.delete("", response_model=CartSummary)
def clear_cart(service: CartService = Depends(get_cart_service)):
    """
    Clear the entire cart.
    """
    service.clear_cart()
    return service.summary()



@router.patch("/{product_id}", response_model=CartSummary)
def update_cart_item(
    product_id: str,
    payload: CartItemUpdate,
    service: CartService = Depends(get_cart_service),
):
    """
    Set the quantity of a product in the cart.

    A quantity of 0 or less removes the line.
    """
    service.update_quantity(product_id, payload.quantity)
    return service.summary()


@router.delete("/{product_id}", response_model=CartSummary)
def remove_cart_item(
    product_id: str,
    service: CartService = Depends(get_cart_service),
):
    """
    Remove a product from the cart.
    """
    service.remove_item(product_id)
    return service.summary()
