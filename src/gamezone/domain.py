"""GameZone marketplace: domain composition root.

A single bounded context covering the catalogue, customer accounts, the
shopping cart and order placement. Elements register themselves with the
``gamezone`` domain through its decorators; ``gamezone.init()`` discovers
them by traversing this package.
"""

from protean.domain import Domain

from gamezone.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
gamezone = Domain(name="gamezone")
