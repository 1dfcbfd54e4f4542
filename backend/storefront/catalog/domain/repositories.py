from abc import ABC, abstractmethod

from .entities import CatalogProduct

class AbstractCatalogLookup(ABC):
    """Interface abstraite de consultation du catalogue.

    Consultée uniquement au moment de passer commande, jamais ensuite.
    """

    @abstractmethod
    async def get_product(self, product_id: str) -> CatalogProduct:
        """Retourne le prix courant et le nom d'un produit. Lève ProductNotFound."""
        raise NotImplementedError
