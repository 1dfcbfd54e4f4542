from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from .entities import OrderAggregate

class AbstractOrderRepository(ABC):
    """Interface abstraite pour le repository des Commandes.

    Le détail de prix et la version de configuration sont conservés tels quels:
    aucune lecture ne recalcule un total.
    """

    @abstractmethod
    async def save(self, order: OrderAggregate) -> OrderAggregate:
        """Enregistre une nouvelle commande."""
        raise NotImplementedError

    @abstractmethod
    async def load(self, order_id: str) -> OrderAggregate:
        """Récupère une commande. Lève OrderNotFound."""
        raise NotImplementedError

    @abstractmethod
    async def list_by_customer(self, customer_id: str, limit: int, offset: int) -> Tuple[List[OrderAggregate], int]:
        """Liste les commandes d'un utilisateur enregistré (plus récentes d'abord) et le total."""
        raise NotImplementedError

    @abstractmethod
    async def list_all(self, limit: int, offset: int, search: Optional[str] = None) -> Tuple[List[OrderAggregate], int]:
        """Liste toutes les commandes (admin), filtrables par fragment d'identifiant."""
        raise NotImplementedError

    @abstractmethod
    async def save_fulfillment(self, order: OrderAggregate, expected_version: int) -> OrderAggregate:
        """Écrit les champs d'exécution si la version stockée vaut `expected_version`.
        Lève StaleState sinon, OrderNotFound si la commande n'existe pas."""
        raise NotImplementedError
