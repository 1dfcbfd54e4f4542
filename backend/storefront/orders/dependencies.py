import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.catalog.dependencies import CatalogLookupDep
from storefront.database import get_db_session
from storefront.orders.application.services import OrderService
from storefront.orders.domain.repositories import AbstractOrderRepository
from storefront.orders.infrastructure.persistence import SQLAlchemyOrderRepository
from storefront.pricing.dependencies import PolicyConfigDep, PolicyConfigRepositoryDep

logger = logging.getLogger(__name__)

# --- Database Session Dependency ---
SessionDep = Annotated[AsyncSession, Depends(get_db_session)]

# --- Repository Dependency ---

def get_order_repository(session: SessionDep) -> AbstractOrderRepository:
    """Fournit une instance du repository de commandes."""
    logger.debug("Providing SQLAlchemyOrderRepository")
    return SQLAlchemyOrderRepository(db_session=session)

OrderRepositoryDep = Annotated[AbstractOrderRepository, Depends(get_order_repository)]

# --- Order Service Dependency ---

def get_order_service(
    order_repo: OrderRepositoryDep,
    catalog: CatalogLookupDep,
    policy_repo: PolicyConfigRepositoryDep,
    policy_config: PolicyConfigDep,
) -> OrderService:
    """Injecte le repository, le catalogue et la configuration tarifaire dans OrderService."""
    return OrderService(
        order_repo=order_repo,
        catalog=catalog,
        policy_repo=policy_repo,
        policy_config=policy_config,
    )

OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
