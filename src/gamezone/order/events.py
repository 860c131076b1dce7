"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from gamezone.domain import gamezone


@gamezone.event(part_of="Order")
class OrderRecorded:
    """Checkout persisted the order; stock is not taken yet."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    tracking_id = String(required=True)
    total_amount = Float(required=True)
    recorded_at = DateTime(required=True)


@gamezone.event(part_of="Order")
class OrderPlaced:
    """Stock was taken and the cart cleared; the order is visible as placed."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    tracking_id = String(required=True)
    total_amount = Float(required=True)
    placed_at = DateTime(required=True)


@gamezone.event(part_of="Order")
class OrderFailed:
    """Checkout was compensated; any stock taken was given back."""

    __version__ = 1

    order_id = Identifier(required=True)
    reason = String(required=True)
    failed_at = DateTime(required=True)


@gamezone.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@gamezone.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    cancelled_at = DateTime(required=True)
