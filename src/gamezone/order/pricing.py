"""Order pricing: subtotal, delivery charge and total."""

from dataclasses import dataclass

FREE_SHIPPING_THRESHOLD = 499
DELIVERY_CHARGE = 49


@dataclass(frozen=True)
class OrderPricing:
    subtotal: float
    delivery_charge: float
    total_amount: float


def delivery_charge_for(subtotal: float) -> float:
    return 0 if subtotal >= FREE_SHIPPING_THRESHOLD else DELIVERY_CHARGE


def price_order(lines) -> OrderPricing:
    """Price ``lines``, an iterable of ``(unit_price, quantity)`` pairs."""
    subtotal = round(sum(price * quantity for price, quantity in lines), 2)
    delivery = delivery_charge_for(subtotal)
    return OrderPricing(
        subtotal=subtotal,
        delivery_charge=delivery,
        total_amount=round(subtotal + delivery, 2),
    )
