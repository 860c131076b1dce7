"""Error taxonomy for the marketplace.

Every error carries the HTTP status it maps to and a machine-readable code.
The API layer renders them as ``{"error": ..., "code": ...}`` bodies; the
services raise them directly and never wrap them in HTTP types.
"""


class StorefrontError(Exception):
    """Base class for all marketplace errors."""

    status_code = 500

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def code(self):
        return type(self).__name__

    def to_dict(self):
        return {"error": self.message, "code": self.code, **self.details}


class NotFound(StorefrontError):
    status_code = 404


class Forbidden(StorefrontError):
    status_code = 403


class Unauthorized(StorefrontError):
    status_code = 401


class AuthenticationFailed(StorefrontError):
    status_code = 400


class ValidationError(StorefrontError):
    """Malformed or conflicting input.

    ``message`` may be a field map (``{"email": ["..."]}``) like Protean's
    own validation errors.
    """

    status_code = 400


class EmptyCart(StorefrontError):
    status_code = 400

    def __init__(self, message="Cart is empty"):
        super().__init__(message)


class InvalidTransition(StorefrontError):
    status_code = 400

    def __init__(self, current, target, message=None):
        super().__init__(
            message or f"Cannot move order from {current} to {target}",
            current_status=current,
            requested_status=target,
        )
        self.current = current
        self.target = target


class InsufficientStock(StorefrontError):
    status_code = 409

    def __init__(self, product_id, requested, available, name=None):
        label = name or product_id
        super().__init__(
            f"Only {available} left in stock for {label}",
            product_id=str(product_id),
            requested=requested,
            available=available,
        )
        self.product_id = str(product_id)
        self.requested = requested
        self.available = available


class TransientStoreError(StorefrontError):
    """A retryable storage failure (lock timeout, lost connection)."""

    status_code = 503


class OrderPlacementFailed(StorefrontError):
    """Checkout could not finish; the order is left for reconciliation."""

    status_code = 500

    def __init__(self, order_id, last_step, reason):
        super().__init__(
            f"Order {order_id} could not be completed after step '{last_step}': {reason}",
            order_id=str(order_id),
            last_step=last_step,
        )
        self.order_id = str(order_id)
        self.last_step = last_step
