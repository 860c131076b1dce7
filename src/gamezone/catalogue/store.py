"""Catalog store port and its repository-backed adapter.

Cart and checkout code depends on ``CatalogStore`` only. The production
adapter works on the Product repository inside the store's critical
section. A stock change based on a read that another worker has since
overwritten is rejected by the version check and surfaces as
``TransientStoreError``, so retries see fresh stock. Tests can subclass the
adapter to inject failures.
"""

from abc import ABC, abstractmethod

from protean.exceptions import ObjectNotFoundError

from gamezone.catalogue.product import Product
from gamezone.errors import NotFound
from gamezone.storage import Storage


class CatalogStore(ABC):
    """Read products and move their stock."""

    @abstractmethod
    def get_product(self, product_id: str) -> Product:
        """Return the product or raise ``NotFound``."""
        ...

    @abstractmethod
    def adjust_stock(
        self,
        product_id: str,
        delta: int,
        conditional: bool = True,
        reference: str | None = None,
    ) -> int:
        """Atomically add ``delta`` to the product's stock; return the new level.

        Raises ``InsufficientStock`` when a conditional adjustment would go
        below zero, ``NotFound`` for an unknown product and
        ``TransientStoreError`` when the store is unavailable.
        """
        ...

    @abstractmethod
    def has_hold(self, product_id: str, reference: str) -> bool:
        """Whether ``reference`` currently holds stock of the product."""
        ...


class RepositoryCatalogStore(CatalogStore):
    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    def _load(self, product_id):
        try:
            return self.storage.repository_for(Product).get(str(product_id))
        except ObjectNotFoundError:
            raise NotFound("Product not found", product_id=str(product_id)) from None

    def get_product(self, product_id: str) -> Product:
        with self.storage.locked():
            return self._load(product_id)

    def adjust_stock(self, product_id, delta, conditional=True, reference=None):
        with self.storage.locked():
            product = self._load(product_id)
            stock = product.adjust_stock(delta, conditional=conditional, reference=reference)
            self.storage.repository_for(Product).add(product)
            return stock

    def has_hold(self, product_id, reference):
        with self.storage.locked():
            try:
                product = self._load(product_id)
            except NotFound:
                return False
            return product.hold_for(reference) is not None
