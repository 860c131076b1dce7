"""Order aggregate: a priced snapshot of a cart plus its status lifecycle.

State Machine:
    PENDING → PLACED → CONFIRMED → SHIPPED → OUT_FOR_DELIVERY → DELIVERED → RETURNED
    PENDING → FAILED
    PLACED/CONFIRMED → CANCELLING → CANCELLED

PENDING, CANCELLING and FAILED belong to the checkout and cancellation sagas.
They are never requested by an admin and never reported as placed.
"""

from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from gamezone.domain import gamezone
from gamezone.errors import InvalidTransition
from gamezone.order.events import (
    OrderCancelled,
    OrderFailed,
    OrderPlaced,
    OrderRecorded,
    OrderStatusChanged,
)
from gamezone.utils.time import utcnow


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PLACED = "placed"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out-for-delivery"
    DELIVERED = "delivered"
    RETURNED = "returned"
    CANCELLING = "cancelling"
    CANCELLED = "cancelled"
    FAILED = "failed"


class PaymentMethod(Enum):
    COD = "cod"
    UPI = "upi"
    OTHER = "other"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class CheckoutStep(Enum):
    RECORDED = "recorded"
    STOCK_TAKEN = "stock_taken"
    CART_CLEARED = "cart_cleared"
    COMPLETED = "completed"
    COMPENSATED = "compensated"
    CANCEL_REQUESTED = "cancel_requested"
    STOCK_RESTORED = "stock_restored"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PLACED, OrderStatus.FAILED},
    OrderStatus.PLACED: {OrderStatus.CONFIRMED, OrderStatus.CANCELLING},
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPED, OrderStatus.CANCELLING},
    OrderStatus.SHIPPED: {OrderStatus.OUT_FOR_DELIVERY},
    OrderStatus.OUT_FOR_DELIVERY: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: {OrderStatus.RETURNED},
    OrderStatus.CANCELLING: {OrderStatus.CANCELLED},
    OrderStatus.RETURNED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.FAILED: set(),  # Terminal
}

# Saga-owned states
INTERNAL_STATES = {OrderStatus.PENDING, OrderStatus.CANCELLING, OrderStatus.FAILED}

# States an admin may move an order into. CANCELLED goes through the
# cancellation saga.
ADMIN_TARGETS = {
    OrderStatus.CONFIRMED,
    OrderStatus.SHIPPED,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
    OrderStatus.RETURNED,
    OrderStatus.CANCELLED,
}

_CANCELLABLE_STATES = {OrderStatus.PLACED, OrderStatus.CONFIRMED}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@gamezone.value_object(part_of="Order")
class ShippingAddress:
    """Where the order goes, captured at checkout and never changed."""

    name = String(required=True, max_length=100)
    phone = String(required=True, max_length=20)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    pincode = String(required=True, max_length=20)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@gamezone.entity(part_of="Order")
class OrderItem:
    """A product line frozen at the name and price it was bought for."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@gamezone.aggregate
class Order:
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.COD.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    subtotal = Float(default=0.0, min_value=0.0)
    delivery_charge = Float(default=0.0, min_value=0.0)
    total_amount = Float(required=True, min_value=0.0)
    tracking_id = String(required=True, max_length=50)
    checkout_step = String(choices=CheckoutStep, default=CheckoutStep.RECORDED.value)
    failure_reason = Text()
    idempotency_key = String(max_length=255)
    delivered_at = DateTime()
    cancelled_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_is_subtotal_plus_delivery(self):
        if self.total_amount is None:
            return
        expected = round((self.subtotal or 0.0) + (self.delivery_charge or 0.0), 2)
        if abs(self.total_amount - expected) > 0.005:
            raise ValidationError({"total_amount": ["Total must equal subtotal plus delivery charge"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        user_id,
        items,
        shipping_address,
        pricing,
        tracking_id,
        payment_method=PaymentMethod.COD.value,
        idempotency_key=None,
    ):
        """Record a new order in PENDING.

        ``items`` is a list of dicts with product_id, name, price and quantity;
        ``pricing`` an ``OrderPricing``.
        """
        if not items:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = utcnow()
        order = cls(
            user_id=str(user_id),
            items=[OrderItem(**item) for item in items],
            shipping_address=(
                ShippingAddress(**shipping_address) if isinstance(shipping_address, dict) else shipping_address
            ),
            payment_method=payment_method or PaymentMethod.COD.value,
            payment_status=PaymentStatus.PENDING.value,
            status=OrderStatus.PENDING.value,
            subtotal=pricing.subtotal,
            delivery_charge=pricing.delivery_charge,
            total_amount=pricing.total_amount,
            tracking_id=tracking_id,
            checkout_step=CheckoutStep.RECORDED.value,
            idempotency_key=idempotency_key,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderRecorded(
                order_id=str(order.id),
                user_id=str(user_id),
                tracking_id=tracking_id,
                total_amount=pricing.total_amount,
                recorded_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    @property
    def is_cancellable(self) -> bool:
        return self.current_status in _CANCELLABLE_STATES

    def can_transition_to(self, target) -> bool:
        return OrderStatus(target) in _VALID_TRANSITIONS[self.current_status]

    def _transition_to(self, target: OrderStatus):
        current = self.current_status
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition(current.value, target.value)

        now = utcnow()
        self.status = target.value
        self.updated_at = now
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                changed_at=now,
            )
        )
        return now

    def record_step(self, step: CheckoutStep):
        self.checkout_step = step.value
        self.updated_at = utcnow()

    # -------------------------------------------------------------------
    # Checkout saga
    # -------------------------------------------------------------------
    def mark_placed(self):
        now = self._transition_to(OrderStatus.PLACED)
        self.checkout_step = CheckoutStep.COMPLETED.value
        self.raise_(
            OrderPlaced(
                order_id=str(self.id),
                user_id=str(self.user_id),
                tracking_id=self.tracking_id,
                total_amount=self.total_amount,
                placed_at=now,
            )
        )

    def mark_failed(self, reason):
        now = self._transition_to(OrderStatus.FAILED)
        self.checkout_step = CheckoutStep.COMPENSATED.value
        self.failure_reason = reason
        self.payment_status = PaymentStatus.FAILED.value
        self.raise_(OrderFailed(order_id=str(self.id), reason=reason, failed_at=now))

    # -------------------------------------------------------------------
    # Cancellation saga
    # -------------------------------------------------------------------
    def begin_cancellation(self):
        if not self.is_cancellable:
            raise InvalidTransition(
                self.status,
                OrderStatus.CANCELLED.value,
                message=f"Cannot cancel an order that is {self.status}",
            )
        self._transition_to(OrderStatus.CANCELLING)
        self.checkout_step = CheckoutStep.CANCEL_REQUESTED.value

    def complete_cancellation(self):
        now = self._transition_to(OrderStatus.CANCELLED)
        self.checkout_step = CheckoutStep.CANCELLED.value
        self.cancelled_at = now
        if self.payment_status == PaymentStatus.PAID.value:
            self.payment_status = PaymentStatus.REFUNDED.value
        self.raise_(OrderCancelled(order_id=str(self.id), user_id=str(self.user_id), cancelled_at=now))

    # -------------------------------------------------------------------
    # Fulfilment (admin)
    # -------------------------------------------------------------------
    def advance_to(self, target):
        """Move along the fulfilment path; cancellation has its own methods."""
        target = OrderStatus(target)
        if target not in ADMIN_TARGETS or target == OrderStatus.CANCELLED:
            raise InvalidTransition(self.status, target.value)

        now = self._transition_to(target)
        if target == OrderStatus.DELIVERED:
            self.delivered_at = now
            if self.payment_method == PaymentMethod.COD.value:
                self.payment_status = PaymentStatus.PAID.value
