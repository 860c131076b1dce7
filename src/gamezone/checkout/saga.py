"""Checkout and cancellation sagas.

Placing an order touches three aggregates (Cart, Order, Product) that are
written one at a time. The order is persisted first as PENDING, so every
later failure leaves something to compensate or to finish:

    1. recorded      order saved as PENDING with its priced snapshot
    2. stock_taken   every line's stock decremented, keyed by the order id
    3. cart_cleared  the ordered lines removed from the cart
    4. completed     order marked PLACED

A failure before step 2 completes is compensated right away: stock taken so
far is given back and the order is marked FAILED. From step 2 on the saga
only moves forward; if it cannot, the order stays PENDING and the
reconciler finishes it.

Cancellation mirrors this: the order moves to CANCELLING, every hold is
given back, then the order is marked CANCELLED.

Store steps are retried on ``TransientStoreError``. All decrements and
restores carry the order id as reference, so a retried step never applies
twice.
"""

import secrets
import string
import time

from protean.exceptions import ObjectNotFoundError

from gamezone.cart.cart import Cart
from gamezone.cart.service import user_guard
from gamezone.catalogue.store import CatalogStore
from gamezone.errors import (
    EmptyCart,
    InsufficientStock,
    InvalidTransition,
    NotFound,
    OrderPlacementFailed,
    TransientStoreError,
    ValidationError,
)
from gamezone.identity.access import Principal, require
from gamezone.order.order import (
    ADMIN_TARGETS,
    CheckoutStep,
    Order,
    OrderStatus,
)
from gamezone.order.pricing import price_order
from gamezone.storage import Storage
from gamezone.utils.logging import get_logger

logger = get_logger(__name__)

MAX_ATTEMPTS = 3
TRACKING_PREFIX = "GZ"
_BASE36 = string.digits + string.ascii_uppercase


def _base36(number: int) -> str:
    digits = []
    while True:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
        if number == 0:
            return "".join(reversed(digits))


def new_tracking_id() -> str:
    """``GZ`` + base-36 microsecond timestamp + random suffix."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
    return f"{TRACKING_PREFIX}{_base36(time.time_ns() // 1000)}{suffix}"


class CheckoutService:
    def __init__(self, storage: Storage, catalog: CatalogStore, max_attempts: int = MAX_ATTEMPTS) -> None:
        self.storage = storage
        self.catalog = catalog
        self.max_attempts = max(1, max_attempts)

    # -------------------------------------------------------------------
    # Store steps
    # -------------------------------------------------------------------
    def retrying(self, operation, *args, **kwargs):
        """Run ``operation``, retrying on ``TransientStoreError``."""
        for attempt in range(1, self.max_attempts + 1):
            try:
                return operation(*args, **kwargs)
            except TransientStoreError as exc:
                logger.warning(
                    "store_step_retry",
                    step=getattr(operation, "__name__", str(operation)),
                    attempt=attempt,
                    error=exc.message,
                )
                if attempt == self.max_attempts:
                    raise

    def load_order(self, order_id) -> Order:
        with self.storage.locked():
            try:
                return self.storage.repository_for(Order).get(str(order_id))
            except ObjectNotFoundError:
                raise NotFound("Order not found", order_id=str(order_id)) from None

    def update_order(self, order_id, mutate) -> Order:
        """Reload the order, apply ``mutate`` and save it in one critical section."""
        with self.storage.locked():
            repo = self.storage.repository_for(Order)
            order = repo.get(str(order_id))
            mutate(order)
            repo.add(order)
            return order

    def take_stock(self, order: Order) -> None:
        for item in order.items:
            self.retrying(
                self.catalog.adjust_stock,
                item.product_id,
                -item.quantity,
                conditional=True,
                reference=str(order.id),
            )
        self.retrying(self.update_order, order.id, lambda o: o.record_step(CheckoutStep.STOCK_TAKEN))
        logger.info("checkout_step", order_id=str(order.id), step=CheckoutStep.STOCK_TAKEN.value)

    def release_stock(self, order: Order) -> None:
        for item in order.items:
            try:
                self.retrying(
                    self.catalog.adjust_stock,
                    item.product_id,
                    item.quantity,
                    conditional=False,
                    reference=str(order.id),
                )
            except NotFound:
                logger.warning(
                    "stock_release_skipped",
                    order_id=str(order.id),
                    product_id=str(item.product_id),
                    reason="product deleted",
                )

    def clear_ordered_lines(self, order: Order) -> None:
        """Remove the order's products from the user's cart; drop it if empty."""

        def _clear():
            with self.storage.locked():
                repo = self.storage.repository_for(Cart)
                cart = repo.find(order.user_id)
                if cart is None:
                    return
                for item in order.items:
                    cart.remove_item(item.product_id)
                if cart.is_empty:
                    repo.remove(cart)
                else:
                    repo.add(cart)

        self.retrying(_clear)
        self.retrying(self.update_order, order.id, lambda o: o.record_step(CheckoutStep.CART_CLEARED))
        logger.info("checkout_step", order_id=str(order.id), step=CheckoutStep.CART_CLEARED.value)

    def complete_placement(self, order: Order) -> Order:
        placed = self.retrying(self.update_order, order.id, lambda o: o.mark_placed())
        logger.info("order_placed", order_id=str(order.id), tracking_id=placed.tracking_id)
        return placed

    def compensate(self, order: Order, reason: str) -> Order:
        """Give back whatever stock the order holds and mark it FAILED."""
        self.release_stock(order)
        failed = self.retrying(self.update_order, order.id, lambda o: o.mark_failed(reason))
        logger.info("checkout_compensated", order_id=str(order.id), reason=reason)
        return failed

    def finish_cancellation(self, order: Order) -> Order:
        self.release_stock(order)
        self.retrying(self.update_order, order.id, lambda o: o.record_step(CheckoutStep.STOCK_RESTORED))
        cancelled = self.retrying(self.update_order, order.id, lambda o: o.complete_cancellation())
        logger.info("order_cancelled", order_id=str(order.id))
        return cancelled

    # -------------------------------------------------------------------
    # Snapshot
    # -------------------------------------------------------------------
    def _snapshot(self, user_id):
        with self.storage.locked():
            cart = self.storage.repository_for(Cart).find(user_id)
        if cart is None or cart.is_empty:
            raise EmptyCart()

        items = []
        for item in cart.items:
            product = self.catalog.get_product(item.product_id)
            if not product.is_active:
                raise NotFound("Product not found", product_id=str(item.product_id))
            items.append(
                {
                    "product_id": str(product.id),
                    "name": product.name,
                    "price": product.price,
                    "quantity": item.quantity,
                }
            )
        return items

    def _unique_tracking_id(self) -> str:
        with self.storage.locked():
            repo = self.storage.repository_for(Order)
            tracking_id = new_tracking_id()
            while repo.by_tracking_id(tracking_id) is not None:
                tracking_id = new_tracking_id()
            return tracking_id

    def _record(self, order: Order) -> None:
        with self.storage.locked():
            self.storage.repository_for(Order).add(order)

    # -------------------------------------------------------------------
    # Use cases
    # -------------------------------------------------------------------
    def place_order(self, user_id, shipping_address, payment_method=None, idempotency_key=None) -> Order:
        with self.storage.guard(user_guard(user_id)):
            if idempotency_key:
                with self.storage.locked():
                    existing = self.storage.repository_for(Order).by_idempotency_key(user_id, idempotency_key)
                if existing is not None and existing.status == OrderStatus.PENDING.value:
                    raise OrderPlacementFailed(
                        existing.id,
                        existing.checkout_step,
                        "An earlier checkout with this key is still being completed",
                    )
                if existing is not None:
                    logger.info("checkout_deduplicated", order_id=str(existing.id))
                    return existing

            items = self.retrying(self._snapshot, user_id)
            pricing = price_order((item["price"], item["quantity"]) for item in items)

            order = Order.create(
                user_id=user_id,
                items=items,
                shipping_address=shipping_address,
                pricing=pricing,
                tracking_id=self.retrying(self._unique_tracking_id),
                payment_method=payment_method,
                idempotency_key=idempotency_key,
            )

            try:
                self.retrying(self._record, order)
            except TransientStoreError as exc:
                raise OrderPlacementFailed(order.id, "validated", exc.message) from exc
            logger.info("checkout_step", order_id=str(order.id), step=CheckoutStep.RECORDED.value)

            try:
                self.take_stock(order)
            except (InsufficientStock, NotFound) as exc:
                self._compensate_or_leave(order, exc.message)
                raise
            except TransientStoreError as exc:
                self._compensate_or_leave(order, exc.message)
                raise OrderPlacementFailed(order.id, CheckoutStep.RECORDED.value, exc.message) from exc

            try:
                self.clear_ordered_lines(order)
                return self.complete_placement(order)
            except TransientStoreError as exc:
                step = self._last_step(order)
                logger.error("checkout_stalled", order_id=str(order.id), step=step, error=exc.message)
                raise OrderPlacementFailed(order.id, step, exc.message) from exc

    def _compensate_or_leave(self, order: Order, reason: str) -> None:
        try:
            self.compensate(order, reason)
        except TransientStoreError as exc:
            logger.error(
                "compensation_stalled",
                order_id=str(order.id),
                error=exc.message,
            )

    def _last_step(self, order: Order) -> str:
        try:
            return self.load_order(order.id).checkout_step
        except TransientStoreError:
            return CheckoutStep.STOCK_TAKEN.value

    def cancel_order(self, principal: Principal, order_id) -> Order:
        order = self.load_order(order_id)
        require(principal.can_cancel_order(order))

        with self.storage.guard(user_guard(order.user_id)):
            order = self.retrying(self.update_order, order_id, lambda o: o.begin_cancellation())
            logger.info("checkout_step", order_id=str(order_id), step=CheckoutStep.CANCEL_REQUESTED.value)
            return self.finish_cancellation(order)

    def update_status(self, principal: Principal, order_id, new_status) -> Order:
        require(principal.is_admin, "Admin access required")

        try:
            target = OrderStatus(new_status)
        except ValueError:
            raise ValidationError({"orderStatus": [f"Unknown order status '{new_status}'"]}) from None

        order = self.load_order(order_id)
        if target not in ADMIN_TARGETS:
            raise InvalidTransition(order.status, target.value)

        if target == OrderStatus.CANCELLED:
            return self.cancel_order(principal, order_id)

        with self.storage.guard(user_guard(order.user_id)):
            updated = self.retrying(self.update_order, order_id, lambda o: o.advance_to(target))
        logger.info("order_status_changed", order_id=str(order_id), status=target.value)
        return updated
