from pydantic import BaseModel, ConfigDict

from storefront.core.money import Money

# Entités du Domaine "Catalog"

class CatalogProduct(BaseModel):
    """Produit tel que lu dans le catalogue au moment de la commande."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    unit_price: Money
