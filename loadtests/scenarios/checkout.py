"""Checkout contention scenario.

Many shoppers race to buy a product with very little stock. A run is
healthy when every checkout ends in 201 (order placed) or 409
(InsufficientStock) and the number of placed orders never exceeds the
initial stock.
"""

import os
import threading

import requests
from locust import HttpUser, SequentialTaskSet, between, events, task

from loadtests.data_generators import checkout_data, registration_data, scarce_product_data
from loadtests.helpers.response import extract_error_detail, is_sold_out
from loadtests.helpers.state import ContestedStock, ShopperState

ADMIN_EMAIL = os.getenv("LOADTEST_ADMIN_EMAIL", "admin@gamezone.com")
ADMIN_PASSWORD = os.getenv("LOADTEST_ADMIN_PASSWORD", "admin123")
CONTESTED_STOCK = int(os.getenv("LOADTEST_CONTESTED_STOCK", "5"))

contested = ContestedStock()
_contested_lock = threading.Lock()
_placed_total = 0


@events.test_start.add_listener
def create_contested_product(environment, **_kwargs):
    """List the scarce product as the seeded admin before shoppers start."""
    login = requests.post(
        f"{environment.host}/auth/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
        timeout=10,
    )
    login.raise_for_status()
    token = login.json()["token"]

    created = requests.post(
        f"{environment.host}/products",
        json=scarce_product_data(CONTESTED_STOCK),
        headers={"Authorization": f"Bearer {token}"},
        timeout=10,
    )
    created.raise_for_status()
    contested.product_id = created.json()["product"]["id"]
    contested.initial_stock = CONTESTED_STOCK


@events.test_stop.add_listener
def report_oversell(**_kwargs):
    status = "OK" if _placed_total <= contested.initial_stock else "OVERSOLD"
    print(f"\n[CHECKOUT] placed={_placed_total} initial_stock={contested.initial_stock} -> {status}\n")


class ContestedCheckoutJourney(SequentialTaskSet):
    """Register -> Add scarce product to cart -> Place order."""

    def on_start(self):
        self.state = ShopperState()

    @task
    def register(self):
        with self.client.post(
            "/auth/register",
            json=registration_data(),
            catch_response=True,
            name="POST /auth/register",
        ) as resp:
            if resp.status_code == 201:
                self.state.token = resp.json()["token"]
            else:
                resp.failure(f"Register failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def add_to_cart(self):
        with self.client.post(
            "/cart/add",
            json={"productId": contested.product_id, "quantity": 1},
            headers=self.state.headers,
            catch_response=True,
            name="POST /cart/add",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Add to cart failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def place_order(self):
        global _placed_total

        with self.client.post(
            "/orders/place",
            json=checkout_data(),
            headers=self.state.headers,
            catch_response=True,
            name="POST /orders/place",
        ) as resp:
            if resp.status_code == 201:
                self.state.placed_order_ids.append(resp.json()["order"]["id"])
                with _contested_lock:
                    _placed_total += 1
                resp.success()
            elif is_sold_out(resp):
                self.state.sold_out_count += 1
                resp.success()
            else:
                resp.failure(f"Checkout failed: {resp.status_code} - {extract_error_detail(resp)}")
        self.interrupt()


class ContestedCheckoutUser(HttpUser):
    tasks = [ContestedCheckoutJourney]
    wait_time = between(0.1, 0.5)
