# /shopstream/routes/cart.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from shopstream.models.api import CartItemRequest, CartLine, CartResponse, CartSubtotalRequest
from shopstream.models.domain import Cart, Product
from shopstream.services.cart_service import CartStore, cart_lines, compute_subtotal, format_money
from shopstream.services.inventory_service import InventoryStore
from shopstream.utils.dependencies import get_cart_store, get_inventory_store

# Cart endpoints. Session carts resolve products against the inventory index
# and then the mock catalog; the stateless subtotal accepts its own list.

router = APIRouter(prefix="/cart", tags=["Cart"])


def build_cart_response(cart: Cart, products: List[Product], session_id: Optional[str] = None) -> CartResponse:
    subtotal = compute_subtotal(products, cart)
    lines = [
        CartLine(
            product_id=line["product_id"],
            title=line["title"],
            quantity=line["quantity"],
            line_total=float(line["line_total"]),
        )
        for line in cart_lines(products, cart)
    ]
    return CartResponse(
        session_id=session_id,
        items=cart,
        lines=lines,
        subtotal=float(subtotal),
        subtotal_display=format_money(subtotal),
    )


@router.post("/subtotal", response_model=CartResponse)
async def cart_subtotal(body: CartSubtotalRequest, inventory_store: InventoryStore = Depends(get_inventory_store)):
    products = body.products if body.products is not None else inventory_store.all_products()
    return build_cart_response(body.cart, products)


@router.get("/{session_id}", response_model=CartResponse)
async def get_cart(
    session_id: str,
    cart_store: CartStore = Depends(get_cart_store),
    inventory_store: InventoryStore = Depends(get_inventory_store),
):
    return build_cart_response(cart_store.get(session_id), inventory_store.all_products(), session_id)


@router.post("/{session_id}/items", response_model=CartResponse)
async def add_to_cart(
    session_id: str,
    body: CartItemRequest,
    cart_store: CartStore = Depends(get_cart_store),
    inventory_store: InventoryStore = Depends(get_inventory_store),
):
    try:
        cart = cart_store.add(session_id, body.product_id, body.quantity)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return build_cart_response(cart, inventory_store.all_products(), session_id)


@router.put("/{session_id}/items", response_model=CartResponse)
async def set_cart_quantity(
    session_id: str,
    body: CartItemRequest,
    cart_store: CartStore = Depends(get_cart_store),
    inventory_store: InventoryStore = Depends(get_inventory_store),
):
    cart = cart_store.set_quantity(session_id, body.product_id, body.quantity)
    return build_cart_response(cart, inventory_store.all_products(), session_id)


@router.delete("/{session_id}/items/{product_id:path}", response_model=CartResponse)
async def remove_from_cart(
    session_id: str,
    product_id: str,
    cart_store: CartStore = Depends(get_cart_store),
    inventory_store: InventoryStore = Depends(get_inventory_store),
):
    cart = cart_store.remove(session_id, product_id)
    return build_cart_response(cart, inventory_store.all_products(), session_id)


@router.delete("/{session_id}", status_code=204)
async def clear_cart(session_id: str, cart_store: CartStore = Depends(get_cart_store)):
    cart_store.clear(session_id)
