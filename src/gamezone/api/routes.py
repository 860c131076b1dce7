"""FastAPI routes for carts and orders."""

from fastapi import APIRouter, Depends, Header

from gamezone.api.schemas import (
    AddToCartRequest,
    AdminOrdersResponse,
    CartResponse,
    OrderMutationResponse,
    OrderResponse,
    OrderStatsResponse,
    PlaceOrderRequest,
    ReconcileResponse,
    UpdateCartRequest,
    UpdateOrderStatusRequest,
)
from gamezone.api.security import admin_principal, current_principal, get_services
from gamezone.identity.access import Principal
from gamezone.services import Services

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse, response_model_exclude_none=True)
def get_cart(
    principal: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
) -> CartResponse:
    return CartResponse.from_view(services.carts.get(principal.user_id))


@cart_router.post("/add", response_model=CartResponse, response_model_exclude_none=True)
def add_to_cart(
    body: AddToCartRequest,
    principal: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
) -> CartResponse:
    view = services.carts.add_item(principal.user_id, body.product_id, body.quantity)
    return CartResponse.from_view(view, message="Added to cart!")


@cart_router.put("/update", response_model=CartResponse, response_model_exclude_none=True)
def update_cart(
    body: UpdateCartRequest,
    principal: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
) -> CartResponse:
    view = services.carts.update_quantity(principal.user_id, body.product_id, body.quantity)
    return CartResponse.from_view(view, message="Cart updated!")


@cart_router.delete("/remove/{product_id}", response_model=CartResponse, response_model_exclude_none=True)
def remove_from_cart(
    product_id: str,
    principal: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
) -> CartResponse:
    view = services.carts.remove_item(principal.user_id, product_id)
    return CartResponse.from_view(view, message="Item removed")


@cart_router.delete("/clear", response_model=CartResponse, response_model_exclude_none=True)
def clear_cart(
    principal: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
) -> CartResponse:
    services.carts.clear(principal.user_id)
    return CartResponse(message="Cart cleared")


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
# Fixed paths are declared before /{order_id} so they are matched first.
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("/place", status_code=201, response_model=OrderMutationResponse)
def place_order(
    body: PlaceOrderRequest,
    idempotency_key: str | None = Header(None),
    principal: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
) -> OrderMutationResponse:
    order = services.checkout.place_order(
        principal.user_id,
        shipping_address=body.shipping_address.model_dump(),
        payment_method=body.payment_method,
        idempotency_key=idempotency_key,
    )
    return OrderMutationResponse(message="Order placed successfully! 🎉", order=OrderResponse.from_order(order))


@order_router.get("/my-orders", response_model=list[OrderResponse])
def my_orders(
    principal: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
) -> list[OrderResponse]:
    return [OrderResponse.from_order(order) for order in services.orders.my_orders(principal.user_id)]


@order_router.get("/admin/all", response_model=AdminOrdersResponse)
def all_orders(
    status: str | None = None,
    principal: Principal = Depends(admin_principal),
    services: Services = Depends(get_services),
) -> AdminOrdersResponse:
    listing = services.orders.all_orders(principal, status=status)
    return AdminOrdersResponse(
        orders=[OrderResponse.from_order(order) for order in listing.orders],
        stats=OrderStatsResponse(
            total_orders=listing.stats.total_orders,
            total_revenue=listing.stats.total_revenue,
            pending_orders=listing.stats.pending_orders,
            delivered_orders=listing.stats.delivered_orders,
        ),
    )


@order_router.post("/admin/reconcile", response_model=ReconcileResponse)
def reconcile(
    older_than_seconds: int | None = None,
    principal: Principal = Depends(admin_principal),
    services: Services = Depends(get_services),
) -> ReconcileResponse:
    report = services.reconciler.reconcile(older_than_seconds)
    return ReconcileResponse(**report.to_dict())


@order_router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: str,
    principal: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
) -> OrderResponse:
    return OrderResponse.from_order(services.orders.get_order(principal, order_id))


@order_router.put("/{order_id}/cancel", response_model=OrderMutationResponse)
def cancel_order(
    order_id: str,
    principal: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
) -> OrderMutationResponse:
    order = services.checkout.cancel_order(principal, order_id)
    return OrderMutationResponse(message="Order cancelled", order=OrderResponse.from_order(order))


@order_router.put("/{order_id}/status", response_model=OrderMutationResponse)
def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    principal: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
) -> OrderMutationResponse:
    order = services.checkout.update_status(principal, order_id, body.order_status)
    return OrderMutationResponse(message="Order status updated", order=OrderResponse.from_order(order))
