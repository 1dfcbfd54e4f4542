from abc import ABC, abstractmethod

from .entities import PolicyConfig

class AbstractPolicyConfigRepository(ABC):
    """Registre des versions de configuration tarifaire déjà utilisées."""

    @abstractmethod
    async def register(self, config: PolicyConfig) -> PolicyConfig:
        """Enregistre une version (idempotent). Lève ConfigVersionConflict si la version
        existe avec d'autres valeurs."""
        raise NotImplementedError

    @abstractmethod
    async def get(self, version: str) -> PolicyConfig:
        """Récupère une version. Lève ConfigVersionNotFound si inconnue."""
        raise NotImplementedError
