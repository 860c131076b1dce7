"""GameZone load testing: Locust entry point.

Many shoppers race for a product with little stock. A sold-out 409 is an
expected outcome, anything else above 400 is logged with its error body.

    locust -f loadtests/locustfile.py ContestedCheckoutUser --headless \
           -u 50 -r 5 -t 120s --host http://localhost:8000

Seed the API first (python src/manage.py seed); the scenario logs in as the
seeded admin to list the contested product.
"""

import logging
from collections import Counter

from locust import events

from loadtests.helpers.response import error_code, extract_error_detail, is_sold_out
from loadtests.scenarios.checkout import ContestedCheckoutUser  # noqa: F401

logger = logging.getLogger("loadtest")

unexpected_errors: Counter = Counter()


@events.request.add_listener
def log_unexpected_failures(request_type, name, response, exception, **_kw):
    if exception:
        unexpected_errors["exception"] += 1
        logger.error("%s %s raised %s", request_type, name, exception)
        return
    if response is None or response.status_code < 400 or is_sold_out(response):
        return
    unexpected_errors[error_code(response) or str(response.status_code)] += 1
    logger.error("%s %s -> %s %s", request_type, name, response.status_code, extract_error_detail(response))


@events.test_start.add_listener
def announce(environment, **_kwargs):
    unexpected_errors.clear()
    logger.info("checkout contention run against %s", environment.host)


@events.test_stop.add_listener
def summarise(**_kwargs):
    if unexpected_errors:
        logger.warning("unexpected errors: %s", dict(unexpected_errors))
    else:
        logger.info("no unexpected errors")
