"""Tests for the starter catalogue and database helpers."""

from gamezone.catalogue.listing import ProductFilters
from gamezone.domain import gamezone
from gamezone.seed import ADMIN, SEED_PRODUCTS, seed
from gamezone.utils.db import drop_db, setup_db


class TestSeed:
    def test_creates_admin_and_catalogue(self, services):
        products = seed(services)

        assert len(products) == len(SEED_PRODUCTS) == 12
        result = services.accounts.login(ADMIN["email"], ADMIN["password"])
        assert result.account.role == "admin"
        assert services.catalogue.search(ProductFilters(limit=100)).total_products == 12

    def test_admin_owns_seeded_products(self, services):
        products = seed(services)
        admin = services.accounts.login(ADMIN["email"], ADMIN["password"]).account
        assert {str(p.seller_id) for p in products} == {str(admin.id)}

    def test_reuses_existing_admin(self, services):
        seed(services)
        seed(services)
        assert services.catalogue.search(ProductFilters(limit=100)).total_products == 24

    def test_featured_listing(self, services):
        seed(services)
        featured = services.catalogue.search(ProductFilters(featured=True, limit=100))
        assert featured.total_products == sum(1 for p in SEED_PRODUCTS if p.get("is_featured"))


class TestDatabaseHelpers:
    def test_memory_provider_is_skipped(self):
        setup_db(gamezone)
        drop_db(gamezone)
