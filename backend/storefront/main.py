"""
Module principal de l'application FastAPI Storefront.

Ce module configure et initialise l'instance FastAPI, ajoute les middlewares
nécessaires (CORS), traduit les familles d'exceptions du domaine en réponses
HTTP et inclut les routeurs (checkout, commandes, administration, factures).
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.config import settings
from storefront.core.exceptions import (
    ConcurrencyError, DomainValidationError, ResourceNotFound, StateError, StorefrontException
)
from storefront.database import create_tables

# --- Importer les routeurs ---
from storefront.invoices.router import invoice_router
from storefront.orders.router import admin_order_router, checkout_router, order_router

# Configurer le logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.DB_CREATE_TABLES:
        logger.info("Création des tables au démarrage (DB_CREATE_TABLES).")
        await create_tables()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="API de tarification, de suivi d'exécution et de facturation des commandes.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Range"],
)

# ======================================================
# Traduction des exceptions du domaine non interceptées
# ======================================================

_STATUS_BY_FAMILY = (
    (ResourceNotFound, status.HTTP_404_NOT_FOUND),
    (ConcurrencyError, status.HTTP_409_CONFLICT),
    (StateError, status.HTTP_409_CONFLICT),
    (DomainValidationError, status.HTTP_400_BAD_REQUEST),
)


@app.exception_handler(StorefrontException)
async def storefront_exception_handler(request: Request, exc: StorefrontException):
    for family, status_code in _STATUS_BY_FAMILY:
        if isinstance(exc, family):
            logger.warning(f"{request.method} {request.url.path} -> {status_code}: {exc.message}")
            return JSONResponse(status_code=status_code, content={"detail": exc.message})
    logger.error(f"{request.method} {request.url.path} -> erreur domaine non classée: {exc.message}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Erreur interne du serveur."},
    )

# ======================================================
# Inclure les routeurs
# ======================================================
app.include_router(checkout_router, prefix=settings.API_V1_PREFIX)
app.include_router(order_router, prefix=settings.API_V1_PREFIX)
app.include_router(invoice_router, prefix=settings.API_V1_PREFIX)
app.include_router(admin_order_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
async def root():
    return {"message": f"Bienvenue sur {settings.APP_NAME}"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
