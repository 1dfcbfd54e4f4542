import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import CurrencyMismatch
from storefront.pricing.domain.entities import PolicyConfig
from storefront.pricing.domain.exceptions import (
    ConfigVersionConflict, ConfigVersionMissing, ConfigVersionNotFound
)
from storefront.pricing.domain.repositories import AbstractPolicyConfigRepository
from storefront.pricing.infrastructure.orm_models import PolicyConfigRecord

logger = logging.getLogger(__name__)


class SQLAlchemyPolicyConfigRepository(AbstractPolicyConfigRepository):
    """Implémentation SQLAlchemy du registre des configurations tarifaires."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    def _check_matches(self, record: PolicyConfigRecord, config: PolicyConfig) -> PolicyConfig:
        try:
            same = PolicyConfig.model_validate(record.payload) == config
        except CurrencyMismatch:
            same = False
        if not same:
            logger.error(f"[PolicyConfigRepository] Conflit sur la version '{config.version}'.")
            raise ConfigVersionConflict(config.version)
        return config

    async def register(self, config: PolicyConfig) -> PolicyConfig:
        if not config.version:
            raise ConfigVersionMissing()
        existing = await self.db.get(PolicyConfigRecord, config.version)
        if existing is not None:
            return self._check_matches(existing, config)

        self.db.add(PolicyConfigRecord(version=config.version, payload=config.model_dump(mode="json")))
        try:
            await self.db.commit()
        except IntegrityError:
            # Version enregistrée entre-temps par une autre requête
            await self.db.rollback()
            logger.warning(f"[PolicyConfigRepository] Version '{config.version}' enregistrée en parallèle, relecture.")
            concurrent = await self.db.get(PolicyConfigRecord, config.version, populate_existing=True)
            if concurrent is None:
                raise
            return self._check_matches(concurrent, config)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"[PolicyConfigRepository] Erreur enregistrement version '{config.version}': {e}", exc_info=True)
            raise
        logger.info(f"[PolicyConfigRepository] Nouvelle version tarifaire enregistrée: '{config.version}'.")
        return config

    async def get(self, version: str) -> PolicyConfig:
        logger.debug(f"[PolicyConfigRepository] Lecture version '{version}'")
        record = await self.db.get(PolicyConfigRecord, version)
        if record is None:
            raise ConfigVersionNotFound(version)
        return PolicyConfig.model_validate(record.payload)
