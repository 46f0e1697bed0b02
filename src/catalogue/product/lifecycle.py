"""Product lifecycle: archiving and re-activation.

Products are never deleted because order lines keep pointing at them.
"""

import structlog
from sqlalchemy.orm import Session

from catalogue.product.browsing import get_product
from catalogue.product.product import Product

logger = structlog.get_logger(__name__)


def archive_product(session: Session, product_id: str) -> Product:
    product = get_product(session, product_id, include_inactive=True)
    product.is_active = False
    session.flush()
    logger.info("product_archived", product_id=product.id)
    return product


def activate_product(session: Session, product_id: str) -> Product:
    product = get_product(session, product_id, include_inactive=True)
    product.is_active = True
    session.flush()
    logger.info("product_activated", product_id=product.id)
    return product
