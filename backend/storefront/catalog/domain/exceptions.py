"""Exceptions spécifiques au domaine Catalog."""
from storefront.core.exceptions import ResourceNotFound


class ProductNotFound(ResourceNotFound):
    """Levée lorsqu'un produit spécifique n'est pas trouvé (ou n'est plus en vente)."""
    def __init__(self, product_id: str):
        super().__init__("Produit", product_id)
        self.product_id = product_id
