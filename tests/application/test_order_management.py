"""Application tests for cancellation, order access and admin status updates."""

import pytest
from gamezone.errors import Forbidden, InvalidTransition, NotFound, ValidationError


def _stock(services, product):
    return services.catalog.get_product(product.id).stock


class TestCancelOrder:
    def test_restores_stock_once(self, services, shopper, list_product, place_order):
        product = list_product(stock=5)
        order = place_order(shopper.user_id, product, quantity=2)
        assert _stock(services, product) == 3

        cancelled = services.checkout.cancel_order(shopper, order.id)

        assert cancelled.status == "cancelled"
        assert cancelled.checkout_step == "cancelled"
        assert cancelled.cancelled_at is not None
        assert _stock(services, product) == 5

        with pytest.raises(InvalidTransition):
            services.checkout.cancel_order(shopper, order.id)
        assert _stock(services, product) == 5

    def test_confirmed_order_can_be_cancelled(self, services, shopper, admin, list_product, place_order):
        order = place_order(shopper.user_id, list_product())
        services.checkout.update_status(admin, order.id, "confirmed")
        assert services.checkout.cancel_order(shopper, order.id).status == "cancelled"

    def test_shipped_order_cannot_be_cancelled(self, services, shopper, admin, list_product, place_order):
        product = list_product(stock=5)
        order = place_order(shopper.user_id, product)
        services.checkout.update_status(admin, order.id, "confirmed")
        services.checkout.update_status(admin, order.id, "shipped")

        with pytest.raises(InvalidTransition):
            services.checkout.cancel_order(shopper, order.id)
        assert _stock(services, product) == 4

    def test_other_user_cannot_cancel(self, services, shopper, other_shopper, list_product, place_order):
        order = place_order(shopper.user_id, list_product())
        with pytest.raises(Forbidden):
            services.checkout.cancel_order(other_shopper, order.id)

    def test_admin_can_cancel(self, services, shopper, admin, list_product, place_order):
        order = place_order(shopper.user_id, list_product())
        assert services.checkout.cancel_order(admin, order.id).status == "cancelled"

    def test_unknown_order(self, services, shopper):
        with pytest.raises(NotFound):
            services.checkout.cancel_order(shopper, "missing")

    def test_deleted_product_is_skipped(self, services, shopper, seller, list_product, place_order):
        gone = list_product(name="Starfield", platform="xbox")
        kept = list_product(name="Hogwarts Legacy", stock=3)
        order = place_order(shopper.user_id, gone, kept)
        services.catalogue.delete(seller, gone.id)

        assert services.checkout.cancel_order(shopper, order.id).status == "cancelled"
        assert _stock(services, kept) == 3


class TestOrderAccess:
    def test_owner_and_admin(self, services, shopper, admin, list_product, place_order):
        order = place_order(shopper.user_id, list_product())
        assert str(services.orders.get_order(shopper, order.id).id) == str(order.id)
        assert str(services.orders.get_order(admin, order.id).id) == str(order.id)

    def test_other_user(self, services, shopper, other_shopper, list_product, place_order):
        order = place_order(shopper.user_id, list_product())
        with pytest.raises(Forbidden):
            services.orders.get_order(other_shopper, order.id)

    def test_missing(self, services, shopper):
        with pytest.raises(NotFound):
            services.orders.get_order(shopper, "missing")


class TestUpdateStatus:
    def test_requires_admin(self, services, shopper, list_product, place_order):
        order = place_order(shopper.user_id, list_product())
        with pytest.raises(Forbidden):
            services.checkout.update_status(shopper, order.id, "confirmed")

    def test_unknown_status(self, services, shopper, admin, list_product, place_order):
        order = place_order(shopper.user_id, list_product())
        with pytest.raises(ValidationError):
            services.checkout.update_status(admin, order.id, "teleported")

    def test_rejects_skipped_state(self, services, shopper, admin, list_product, place_order):
        order = place_order(shopper.user_id, list_product())
        with pytest.raises(InvalidTransition):
            services.checkout.update_status(admin, order.id, "delivered")

    def test_rejects_backward_move(self, services, shopper, admin, list_product, place_order):
        order = place_order(shopper.user_id, list_product())
        services.checkout.update_status(admin, order.id, "confirmed")
        with pytest.raises(InvalidTransition):
            services.checkout.update_status(admin, order.id, "placed")

    @pytest.mark.parametrize("internal", ["pending", "cancelling", "failed"])
    def test_rejects_internal_states(self, services, shopper, admin, list_product, place_order, internal):
        order = place_order(shopper.user_id, list_product())
        with pytest.raises(InvalidTransition):
            services.checkout.update_status(admin, order.id, internal)

    def test_full_fulfilment_path(self, services, shopper, admin, list_product, place_order):
        order = place_order(shopper.user_id, list_product())
        for target in ("confirmed", "shipped", "out-for-delivery", "delivered"):
            order = services.checkout.update_status(admin, order.id, target)

        assert order.status == "delivered"
        assert order.delivered_at is not None
        assert order.payment_status == "paid"

    def test_cancelled_runs_cancellation(self, services, shopper, admin, list_product, place_order):
        product = list_product(stock=2)
        order = place_order(shopper.user_id, product)
        assert services.checkout.update_status(admin, order.id, "cancelled").status == "cancelled"
        assert _stock(services, product) == 2


class TestAdminListing:
    def test_stats(self, services, shopper, other_shopper, admin, list_product, place_order):
        product = list_product(price=600, original_price=900, stock=10)
        delivered = place_order(shopper.user_id, product)
        place_order(other_shopper.user_id, product)
        for target in ("confirmed", "shipped", "out-for-delivery", "delivered"):
            services.checkout.update_status(admin, delivered.id, target)

        listing = services.orders.all_orders(admin)
        assert listing.stats.total_orders == 2
        assert listing.stats.total_revenue == 1200
        assert listing.stats.pending_orders == 1
        assert listing.stats.delivered_orders == 1

    def test_status_filter(self, services, shopper, admin, list_product, place_order):
        product = list_product(stock=10)
        place_order(shopper.user_id, product)
        cancelled = place_order(shopper.user_id, product)
        services.checkout.cancel_order(shopper, cancelled.id)

        listing = services.orders.all_orders(admin, status="cancelled")
        assert [str(o.id) for o in listing.orders] == [str(cancelled.id)]
        assert listing.stats.total_orders == 1

    def test_requires_admin(self, services, shopper):
        with pytest.raises(Forbidden):
            services.orders.all_orders(shopper)
