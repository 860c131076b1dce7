"""Catalogue use cases: browse, list, edit and delete products."""

from protean.exceptions import ObjectNotFoundError

from gamezone.catalogue.listing import ProductFilters, ProductPage, search
from gamezone.catalogue.product import Product
from gamezone.errors import NotFound
from gamezone.identity.access import Principal, require
from gamezone.storage import Storage
from gamezone.utils.logging import get_logger

logger = get_logger(__name__)


class CatalogueService:
    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    def _load(self, product_id) -> Product:
        try:
            return self.storage.repository_for(Product).get(str(product_id))
        except ObjectNotFoundError:
            raise NotFound("Product not found", product_id=str(product_id)) from None

    def search(self, filters: ProductFilters) -> ProductPage:
        with self.storage.locked():
            return search(self.storage.repository_for(Product), filters)

    def get(self, product_id) -> Product:
        with self.storage.locked():
            return self._load(product_id)

    def create(self, principal: Principal, **data) -> Product:
        require(principal.can_list_products(), "Only sellers can list products")

        with self.storage.locked():
            product = Product.create(seller_id=principal.user_id, **data)
            self.storage.repository_for(Product).add(product)

        logger.info("product_listed", product_id=str(product.id), seller_id=principal.user_id)
        return product

    def update(self, principal: Principal, product_id, **changes) -> Product:
        with self.storage.locked():
            product = self._load(product_id)
            require(principal.can_manage_product(product))
            product.update_details(**changes)
            self.storage.repository_for(Product).add(product)
            return product

    def delete(self, principal: Principal, product_id) -> None:
        with self.storage.locked():
            product = self._load(product_id)
            require(principal.can_manage_product(product))
            self.storage.repository_for(Product).remove(product)

        logger.info("product_deleted", product_id=str(product_id), actor=principal.user_id)
