"""Composition root: build every service over one ``Storage`` handle."""

from dataclasses import dataclass

from gamezone.cart.service import CartService
from gamezone.catalogue.management import CatalogueService
from gamezone.catalogue.store import CatalogStore, RepositoryCatalogStore
from gamezone.checkout.reconciliation import CheckoutReconciler
from gamezone.checkout.saga import CheckoutService
from gamezone.config import Settings
from gamezone.identity.accounts import AccountService
from gamezone.identity.tokens import TokenIssuer
from gamezone.order.queries import OrderQueries
from gamezone.storage import Storage


@dataclass(frozen=True)
class Services:
    storage: Storage
    settings: Settings
    catalog: CatalogStore
    catalogue: CatalogueService
    accounts: AccountService
    carts: CartService
    checkout: CheckoutService
    orders: OrderQueries
    reconciler: CheckoutReconciler


def build_services(storage: Storage, settings: Settings, catalog: CatalogStore | None = None) -> Services:
    catalog = catalog or RepositoryCatalogStore(storage)
    checkout = CheckoutService(storage, catalog, max_attempts=settings.checkout_max_attempts)
    return Services(
        storage=storage,
        settings=settings,
        catalog=catalog,
        catalogue=CatalogueService(storage),
        accounts=AccountService(storage, TokenIssuer(settings), catalog),
        carts=CartService(storage, catalog),
        checkout=checkout,
        orders=OrderQueries(storage),
        reconciler=CheckoutReconciler(checkout, older_than_seconds=settings.reconcile_after_seconds),
    )
