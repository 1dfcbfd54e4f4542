"""
Dépendances pour le module Catalog.
"""
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.catalog.domain.repositories import AbstractCatalogLookup
from storefront.catalog.infrastructure.persistence import SQLAlchemyCatalogLookup
from storefront.database import get_db_session


def get_catalog_lookup(session: AsyncSession = Depends(get_db_session)) -> AbstractCatalogLookup:
    """Fournit l'implémentation concrète de la consultation du catalogue."""
    return SQLAlchemyCatalogLookup(db_session=session)

CatalogLookupDep = Annotated[AbstractCatalogLookup, Depends(get_catalog_lookup)]
