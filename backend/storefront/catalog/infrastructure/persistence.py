import logging

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.catalog.domain.entities import CatalogProduct
from storefront.catalog.domain.exceptions import ProductNotFound
from storefront.catalog.domain.repositories import AbstractCatalogLookup
from storefront.catalog.infrastructure.orm_models import ProductRecord
from storefront.core.money import Money

logger = logging.getLogger(__name__)


class SQLAlchemyCatalogLookup(AbstractCatalogLookup):
    """Lecture du catalogue produits via SQLAlchemy."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get_product(self, product_id: str) -> CatalogProduct:
        logger.debug(f"[CatalogLookup] Lecture produit ID: {product_id}")
        record = await self.db.get(ProductRecord, product_id)
        if record is None or not record.is_active:
            logger.warning(f"[CatalogLookup] Produit ID {product_id} introuvable ou inactif.")
            raise ProductNotFound(product_id)
        return CatalogProduct(
            id=record.id,
            name=record.name,
            unit_price=Money.from_minor_units(record.unit_price_minor, record.currency),
        )
