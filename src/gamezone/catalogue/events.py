"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from gamezone.domain import gamezone


@gamezone.event(part_of="Product")
class ProductListed:
    """A seller put a new product up for sale."""

    __version__ = 1

    product_id = Identifier(required=True)
    seller_id = Identifier()
    name = String(required=True)
    price = Float(required=True)
    stock = Integer(required=True)
    listed_at = DateTime(required=True)


@gamezone.event(part_of="Product")
class ProductUpdated:
    """Product details, price or flags were edited."""

    __version__ = 1

    product_id = Identifier(required=True)
    changed_fields = String(required=True)  # comma separated
    price = Float(required=True)
    updated_at = DateTime(required=True)


@gamezone.event(part_of="Product")
class StockAdjusted:
    """Stock went up or down, optionally on behalf of an order."""

    __version__ = 1

    product_id = Identifier(required=True)
    delta = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    reference = String()
    adjusted_at = DateTime(required=True)
