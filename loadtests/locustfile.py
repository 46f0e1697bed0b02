"""Maison storefront load testing: Locust entry point.

Run specific scenarios with Locust's class selection.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py --host http://localhost:3000

    # Shopper journeys only:
    locust -f loadtests/locustfile.py ShopperUser

    # Last-unit contention (needs an admin account):
    locust -f loadtests/locustfile.py LastUnitRaceUser \
           --admin-email admin@example.com --admin-password '...'

    # Headless (CI mode):
    locust -f loadtests/locustfile.py ShopperUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

# Import all user classes so Locust discovers them
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.storefront import LastUnitRaceUser, ShopperUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.init_command_line_parser.add_listener
def add_arguments(parser):
    parser.add_argument("--admin-email", default="", help="Admin account used to create and restock products")
    parser.add_argument("--admin-password", default="", is_secret=True, help="Password for --admin-email")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request.

    Fires globally for all scenarios. Extracts the API error body so you see
    "Insufficient inventory for product P1 (product_id=P1)" instead of just "409".
    """
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    """Log a marker when load test begins."""
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Check the server is still healthy when the test ends."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    if not environment.host:
        return
    try:
        resp = requests.get(f"{environment.host}/health", timeout=5)
        print(f"[LOADTEST] Health after run: {resp.status_code} {resp.text.strip()}\n")
    except requests.RequestException as e:
        print(f"[LOADTEST] Could not reach /health: {e}\n")
