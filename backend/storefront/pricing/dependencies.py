"""
Dépendances pour le module Pricing.
"""
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database import get_db_session
from storefront.pricing.config import PricingSettings, live_policy_config, pricing_settings
from storefront.pricing.domain.entities import PolicyConfig
from storefront.pricing.domain.repositories import AbstractPolicyConfigRepository
from storefront.pricing.infrastructure.persistence import SQLAlchemyPolicyConfigRepository

# --- Pricing Settings Dependency ---

def get_pricing_settings() -> PricingSettings:
    """Retourne l'instance globale des paramètres tarifaires."""
    return pricing_settings

PricingSettingsDep = Annotated[PricingSettings, Depends(get_pricing_settings)]

# --- Policy Config Dependency ---

def get_policy_config(settings: PricingSettingsDep) -> PolicyConfig:
    """Fournit la configuration tarifaire en vigueur."""
    return live_policy_config(settings)

PolicyConfigDep = Annotated[PolicyConfig, Depends(get_policy_config)]

# --- Repository Dependency ---

def get_policy_config_repository(
    session: AsyncSession = Depends(get_db_session)
) -> AbstractPolicyConfigRepository:
    return SQLAlchemyPolicyConfigRepository(db_session=session)

PolicyConfigRepositoryDep = Annotated[AbstractPolicyConfigRepository, Depends(get_policy_config_repository)]
