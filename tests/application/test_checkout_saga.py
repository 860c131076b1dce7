"""Application tests for order placement."""

import pytest
from gamezone.cart.cart import Cart
from gamezone.checkout.saga import new_tracking_id
from gamezone.errors import EmptyCart, InsufficientStock, NotFound
from gamezone.order.order import Order


def _stock(services, product):
    return services.catalog.get_product(product.id).stock


def _cart(services, user_id):
    with services.storage.locked():
        return services.storage.repository_for(Cart).find(user_id)


class TestPlaceOrder:
    @pytest.mark.parametrize(
        "price, delivery",
        [(449, 49), (450, 49), (499, 0), (500, 0)],
    )
    def test_delivery_charge(self, services, shopper, list_product, place_order, price, delivery):
        product = list_product(price=price, original_price=999)
        order = place_order(shopper.user_id, product)

        assert order.subtotal == price
        assert order.delivery_charge == delivery
        assert order.total_amount == price + delivery

    def test_snapshot_and_status(self, services, shopper, list_product, place_order, shipping_address):
        product = list_product(name="Elden Ring", price=1799, original_price=3499)
        order = place_order(shopper.user_id, product, quantity=2)

        assert order.status == "placed"
        assert order.checkout_step == "completed"
        assert order.payment_method == "cod"
        assert order.tracking_id.startswith("GZ")
        assert order.shipping_address.city == shipping_address["city"]
        assert [(i.name, i.price, i.quantity) for i in order.items] == [("Elden Ring", 1799, 2)]

    def test_decrements_stock_and_deletes_cart(self, services, shopper, list_product, place_order):
        product = list_product(stock=5)
        place_order(shopper.user_id, product, quantity=2)

        assert _stock(services, product) == 3
        assert _cart(services, shopper.user_id) is None

    def test_later_price_changes_do_not_touch_order(self, services, shopper, seller, list_product, place_order):
        product = list_product(price=1000, original_price=2000)
        order = place_order(shopper.user_id, product)

        services.catalogue.update(seller, product.id, price=10)
        stored = services.orders.get_order(shopper, order.id)
        assert stored.items[0].price == 1000
        assert stored.total_amount == 1000

    def test_payment_method(self, services, shopper, list_product, place_order):
        product = list_product()
        order = place_order(shopper.user_id, product, payment_method="upi")
        assert order.payment_method == "upi"

    def test_unique_tracking_ids(self):
        assert len({new_tracking_id() for _ in range(200)}) == 200


class TestEmptyCart:
    def test_no_cart(self, services, shopper, shipping_address):
        with pytest.raises(EmptyCart):
            services.checkout.place_order(shopper.user_id, shipping_address)

    def test_emptied_cart_leaves_stock_alone(self, services, shopper, list_product, shipping_address):
        product = list_product(stock=4)
        services.carts.add_item(shopper.user_id, product.id, 1)
        services.carts.remove_item(shopper.user_id, product.id)

        with pytest.raises(EmptyCart):
            services.checkout.place_order(shopper.user_id, shipping_address)
        assert _stock(services, product) == 4
        assert services.orders.my_orders(shopper.user_id) == []


class TestInsufficientStock:
    def test_rolls_back_everything(self, services, shopper, list_product, shipping_address):
        plenty = list_product(name="Cyberpunk 2077", stock=10)
        scarce = list_product(name="Gran Turismo 7", stock=1)
        services.carts.add_item(shopper.user_id, plenty.id, 2)
        services.carts.add_item(shopper.user_id, scarce.id, 2)

        with pytest.raises(InsufficientStock) as exc_info:
            services.checkout.place_order(shopper.user_id, shipping_address)

        assert exc_info.value.product_id == str(scarce.id)
        assert exc_info.value.available == 1
        assert _stock(services, plenty) == 10
        assert _stock(services, scarce) == 1
        assert len(_cart(services, shopper.user_id).items) == 2

    def test_order_is_failed_and_hidden(self, services, shopper, admin, list_product, shipping_address):
        product = list_product(stock=0)
        services.carts.add_item(shopper.user_id, product.id, 1)

        with pytest.raises(InsufficientStock):
            services.checkout.place_order(shopper.user_id, shipping_address)

        failed = services.orders.all_orders(admin, status="failed").orders
        assert len(failed) == 1
        assert failed[0].checkout_step == "compensated"
        assert services.orders.all_orders(admin).orders == []

    def test_deleted_product(self, services, shopper, seller, list_product, shipping_address):
        product = list_product()
        services.carts.add_item(shopper.user_id, product.id, 1)
        services.catalogue.delete(seller, product.id)

        with pytest.raises(NotFound):
            services.checkout.place_order(shopper.user_id, shipping_address)

    def test_deactivated_product(self, services, shopper, seller, list_product, shipping_address):
        product = list_product(stock=3)
        services.carts.add_item(shopper.user_id, product.id, 1)
        services.catalogue.update(seller, product.id, is_active=False)

        with pytest.raises(NotFound) as exc_info:
            services.checkout.place_order(shopper.user_id, shipping_address)

        assert exc_info.value.details["product_id"] == str(product.id)
        assert _stock(services, product) == 3
        assert services.orders.my_orders(shopper.user_id) == []


class TestIdempotency:
    def test_same_key_returns_same_order(self, services, shopper, list_product, place_order):
        product = list_product(stock=5)
        first = place_order(shopper.user_id, product, idempotency_key="checkout-1")
        services.carts.add_item(shopper.user_id, product.id, 1)
        second = services.checkout.place_order(
            shopper.user_id, first.shipping_address.to_dict(), idempotency_key="checkout-1"
        )

        assert str(second.id) == str(first.id)
        assert _stock(services, product) == 4

    def test_keys_are_scoped_per_user(self, services, shopper, other_shopper, list_product, place_order):
        product = list_product(stock=5)
        first = place_order(shopper.user_id, product, idempotency_key="checkout-1")
        second = place_order(other_shopper.user_id, product, idempotency_key="checkout-1")

        assert str(first.id) != str(second.id)
        assert _stock(services, product) == 3

    def test_failed_attempt_does_not_block_the_key(
        self, services, shopper, seller, list_product, shipping_address
    ):
        product = list_product(stock=0)
        services.carts.add_item(shopper.user_id, product.id, 1)
        with pytest.raises(InsufficientStock):
            services.checkout.place_order(shopper.user_id, shipping_address, idempotency_key="checkout-1")

        services.catalogue.update(seller, product.id, stock=5)
        order = services.checkout.place_order(shopper.user_id, shipping_address, idempotency_key="checkout-1")

        assert order.status == "placed"
        assert _stock(services, product) == 4
        assert _cart(services, shopper.user_id) is None

        again = services.checkout.place_order(shopper.user_id, shipping_address, idempotency_key="checkout-1")
        assert str(again.id) == str(order.id)


class TestRepeatCheckout:
    def test_second_checkout_for_same_user(self, services, shopper, list_product, place_order):
        product = list_product(stock=5)
        first = place_order(shopper.user_id, product)
        second = place_order(shopper.user_id, product, quantity=2)

        assert first.status == second.status == "placed"
        assert str(first.id) != str(second.id)
        assert _stock(services, product) == 2
        assert _cart(services, shopper.user_id) is None

    def test_cart_refills_after_checkout(self, services, shopper, list_product, place_order):
        product = list_product(stock=5)
        place_order(shopper.user_id, product)

        view = services.carts.add_item(shopper.user_id, product.id, 1)

        assert [line.quantity for line in view.items] == [1]
        assert len(_cart(services, shopper.user_id).items) == 1


class TestOrderQueries:
    def test_my_orders_newest_first(self, services, shopper, other_shopper, list_product, place_order):
        product = list_product(stock=10)
        first = place_order(shopper.user_id, product)
        second = place_order(shopper.user_id, product)
        place_order(other_shopper.user_id, product)

        orders = services.orders.my_orders(shopper.user_id)
        assert [str(o.id) for o in orders] == [str(second.id), str(first.id)]

    def test_stored_order_matches_returned_order(self, services, shopper, list_product, place_order):
        order = place_order(shopper.user_id, list_product())
        with services.storage.locked():
            stored = services.storage.repository_for(Order).get(order.id)
        assert stored.status == "placed"
        assert stored.tracking_id == order.tracking_id
