"""Repository for the Product aggregate."""

from gamezone.catalogue.product import Product
from gamezone.domain import gamezone
from gamezone.storage import iter_all


@gamezone.repository(part_of=Product)
class ProductRepository:
    """Product lookups beyond plain ``get``/``add``.

    Filters passed to ``active`` must be exact-match field values; range and
    text matching happen in ``gamezone.catalogue.listing``.
    """

    def active(self, **filters) -> list[Product]:
        return list(iter_all(self._dao.query.filter(is_active=True, **filters)))

    def by_seller(self, seller_id: str) -> list[Product]:
        return list(iter_all(self._dao.query.filter(seller_id=str(seller_id))))

    def remove(self, product: Product) -> None:
        self._dao.delete(product)
