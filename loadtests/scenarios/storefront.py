"""Storefront load test scenarios.

A shopper journey through the public API (register, browse, fill the cart,
check out) and a contention scenario in which many users race for a few
units of the same product. Oversold stock shows up as a checkout that
succeeds after the restocked quantity ran out.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import browse_filters, cart_quantity, product_data, registration_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import AdminState, ShopperState


class ShopperJourney(SequentialTaskSet):
    """Register -> Browse -> View Product -> Add to Cart -> View Cart -> Checkout -> Orders.

    Models a new customer buying one or two items. A 409 at checkout is an
    expected outcome when another shopper took the last units.
    """

    def on_start(self):
        self.state = ShopperState()

    @task
    def register(self):
        with self.client.post(
            "/api/auth/register",
            json=registration_data(),
            catch_response=True,
            name="POST /api/auth/register",
        ) as resp:
            if resp.status_code == 201:
                self.state.token = resp.json()["token"]
            else:
                resp.failure(f"Register failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def browse(self):
        with self.client.get(
            "/api/products",
            params=browse_filters(),
            catch_response=True,
            name="GET /api/products",
        ) as resp:
            if resp.status_code == 200:
                self.state.browsed_product_ids = [p["id"] for p in resp.json()["items"] if p["in_stock"]]
            else:
                resp.failure(f"Browse failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def view_product(self):
        if not self.state.browsed_product_ids:
            self.interrupt()
        product_id = random.choice(self.state.browsed_product_ids)
        self.client.get(f"/api/products/{product_id}", name="GET /api/products/{id}")

    @task
    def add_to_cart(self):
        for product_id in random.sample(self.state.browsed_product_ids, k=min(2, len(self.state.browsed_product_ids))):
            with self.client.post(
                "/api/cart/items",
                json={"product_id": product_id, "quantity": cart_quantity()},
                headers=self.state.headers,
                catch_response=True,
                name="POST /api/cart/items",
            ) as resp:
                if resp.status_code == 201:
                    self.state.cart_product_ids.append(product_id)
                else:
                    resp.failure(f"Add to cart failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def view_cart(self):
        self.client.get("/api/cart", headers=self.state.headers, name="GET /api/cart")

    @task
    def checkout(self):
        with self.client.post(
            "/api/checkout",
            headers=self.state.headers,
            catch_response=True,
            name="POST /api/checkout",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_codes.append(resp.json()["order_code"])
            elif resp.status_code == 409:
                # Sold out between browsing and paying
                resp.success()
            else:
                resp.failure(f"Checkout failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def list_orders(self):
        self.client.get("/api/orders", headers=self.state.headers, name="GET /api/orders")

    @task
    def done(self):
        self.interrupt()


class ShopperUser(HttpUser):
    """Simulated customer running the full shopping journey."""

    tasks = [ShopperJourney]
    wait_time = between(0.5, 2.0)


class LastUnitRaceUser(HttpUser):
    """Many users hammering checkout for one scarce product.

    Requires an admin account (``manage.py create-admin``); credentials come
    from the ``--admin-email`` / ``--admin-password`` Locust options.
    """

    wait_time = between(0.1, 0.5)
    weight = 1

    def on_start(self):
        self.state = ShopperState()
        self.admin = AdminState()
        resp = self.client.post("/api/auth/register", json=registration_data(), name="POST /api/auth/register")
        if resp.status_code == 201:
            self.state.token = resp.json()["token"]

        options = self.environment.parsed_options
        if options is not None and options.admin_email:
            resp = self.client.post(
                "/api/auth/login",
                json={"email": options.admin_email, "password": options.admin_password},
                name="POST /api/auth/login",
            )
            if resp.status_code == 200:
                self.admin.token = resp.json()["token"]

    def _scarce_product(self) -> str | None:
        if not self.admin.token:
            return None
        if not self.admin.product_ids:
            resp = self.client.post(
                "/api/admin/products",
                json=product_data(stock=1),
                headers=self.admin.headers,
                name="POST /api/admin/products",
            )
            if resp.status_code != 201:
                return None
            self.admin.product_ids.append(resp.json()["id"])
        return self.admin.product_ids[-1]

    @task
    def race_for_last_unit(self):
        product_id = self._scarce_product()
        if product_id is None:
            return

        with self.client.post(
            "/api/checkout",
            json={"items": [{"product_id": product_id, "quantity": 1}]},
            headers=self.state.headers,
            catch_response=True,
            name="POST /api/checkout (race)",
        ) as resp:
            if resp.status_code in (201, 409):
                resp.success()
            else:
                resp.failure(f"Race checkout failed: {resp.status_code} - {extract_error_detail(resp)}")

        with self.client.get(
            f"/api/products/{product_id}", catch_response=True, name="GET /api/products/{id}"
        ) as product:
            stock = product.json()["stock"] if product.status_code == 200 else None
            if stock is not None and stock < 0:
                product.failure("Stock went negative")

        if stock == 0:
            self.client.post(
                f"/api/admin/products/{product_id}/restock",
                json={"quantity": 1},
                headers=self.admin.headers,
                name="POST /api/admin/products/{id}/restock",
            )
