import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Response, status

from storefront.config import settings  # Import des constantes de pagination
from storefront.core.exceptions import (
    ConcurrencyError, DomainValidationError, ResourceNotFound, StateError
)
from storefront.orders.application.schemas import (
    CheckoutPreviewRequest, FulfillmentUpdate, OrderCreate, OrderResponse,
    PaginatedOrderResponse, PricingCheckResponse
)
from storefront.orders.dependencies import OrderServiceDep
from storefront.pricing.domain.entities import PriceBreakdown

logger = logging.getLogger(__name__)

checkout_router = APIRouter(
    prefix="/checkout",
    tags=["Checkout"],
)

order_router = APIRouter(
    prefix="/orders",
    tags=["Orders"],
)

admin_order_router = APIRouter(
    prefix="/admin/orders",
    tags=["Admin Orders"],
)


@checkout_router.post("/preview", response_model=PriceBreakdown)
async def preview_checkout_endpoint(
    service: OrderServiceDep,
    preview_data: CheckoutPreviewRequest,
):
    """Calcule le détail de prix affiché au checkout, sans créer de commande."""
    try:
        return await service.preview(preview_data)
    except ResourceNotFound as e:
        logger.warning(f"Aperçu checkout impossible: {e}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DomainValidationError as e:
        logger.warning(f"Aperçu checkout refusé: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception(f"Erreur inattendue aperçu checkout: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne du serveur.")


@order_router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order_endpoint(
    service: OrderServiceDep,
    order_data: OrderCreate,
):
    """Crée une commande (client enregistré ou invité) au prix du catalogue."""
    try:
        created_order = await service.place_order(order_data)
        logger.info(f"Commande {created_order.id} créée avec succès (total {created_order.breakdown.total}).")
        return OrderResponse.from_aggregate(created_order)
    except ResourceNotFound as e:
        logger.warning(f"Échec création commande: {e}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DomainValidationError as e:
        logger.warning(f"Échec création commande: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception(f"Erreur inattendue création commande: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne du serveur.")


@order_router.get("/", response_model=PaginatedOrderResponse)
async def list_customer_orders_endpoint(
    service: OrderServiceDep,
    response: Response,
    customer_id: str = Query(..., min_length=1),
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0)
):
    """Liste les commandes d'un client, les plus récentes d'abord."""
    try:
        orders, total_count = await service.list_customer_orders(
            customer_id=customer_id,
            limit=limit,
            offset=offset
        )
        end_range = offset + len(orders) - 1 if orders else offset
        response.headers["Content-Range"] = f"orders {offset}-{end_range}/{total_count}"

        order_responses = [OrderResponse.from_aggregate(order) for order in orders]
        return PaginatedOrderResponse(items=order_responses, total=total_count)
    except Exception as e:
        logger.exception(f"Erreur listage commandes client {customer_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne du serveur.")


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order_details_endpoint(
    service: OrderServiceDep,
    order_id: str,
):
    """Récupère une commande telle qu'enregistrée (aucun recalcul de prix)."""
    try:
        order = await service.get_order(order_id)
        return OrderResponse.from_aggregate(order)
    except ResourceNotFound as e:
        logger.debug(f"Commande {order_id} non trouvée.")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.exception(f"Erreur récupération commande {order_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne du serveur.")

# Endpoints Admin

@admin_order_router.get("/", response_model=PaginatedOrderResponse)
async def list_all_orders_endpoint(
    service: OrderServiceDep,
    response: Response,
    search: Optional[str] = Query(default=None, description="Fragment de l'identifiant de commande"),
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0)
):
    """Liste toutes les commandes (écran admin), avec recherche sur un fragment d'ID."""
    try:
        orders, total_count = await service.list_all_orders(limit=limit, offset=offset, search=search)
        end_range = offset + len(orders) - 1 if orders else offset
        response.headers["Content-Range"] = f"orders {offset}-{end_range}/{total_count}"
        return PaginatedOrderResponse(
            items=[OrderResponse.from_aggregate(order) for order in orders],
            total=total_count,
        )
    except Exception as e:
        logger.exception(f"Erreur listage admin des commandes: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne du serveur.")


@admin_order_router.patch("/{order_id}/fulfillment", response_model=OrderResponse)
async def update_fulfillment_endpoint(
    service: OrderServiceDep,
    order_id: str,
    update: FulfillmentUpdate,
):
    """Met à jour statut de commande, statut d'expédition et transporteur."""
    try:
        updated_order = await service.update_fulfillment(order_id, update)
        logger.info(
            f"Exécution commande {order_id} mise à jour: "
            f"{updated_order.fulfillment.order_status.value}/{updated_order.fulfillment.shipping_status.value}."
        )
        return OrderResponse.from_aggregate(updated_order)
    except ResourceNotFound as e:
        logger.warning(f"Commande {order_id} non trouvée pour MAJ exécution.")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ConcurrencyError as e:
        logger.warning(f"Conflit de version commande {order_id}: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except StateError as e:
        logger.warning(f"Transition refusée commande {order_id}: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except DomainValidationError as e:
        logger.warning(f"Données d'exécution invalides commande {order_id}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception(f"Erreur inattendue MAJ exécution commande {order_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne du serveur.")


@admin_order_router.get("/{order_id}/pricing-check", response_model=PricingCheckResponse)
async def check_order_pricing_endpoint(
    service: OrderServiceDep,
    order_id: str,
):
    """Recalcule le prix avec la configuration d'origine et signale toute dérive."""
    try:
        check = await service.check_pricing(order_id)
        return PricingCheckResponse.from_check(check)
    except ResourceNotFound as e:
        logger.warning(f"Contrôle tarifaire impossible pour la commande {order_id}: {e}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DomainValidationError as e:
        logger.warning(f"Contrôle tarifaire refusé pour la commande {order_id}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception(f"Erreur inattendue contrôle tarifaire commande {order_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne du serveur.")
