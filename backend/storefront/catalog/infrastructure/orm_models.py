from typing import Optional

from sqlmodel import Field, SQLModel


class ProductRecord(SQLModel, table=True):
    """Modèle de table pour les produits (lecture seule pour ce service)."""
    id: str = Field(primary_key=True, max_length=64)
    name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None)
    unit_price_minor: int = Field(ge=0) # Prix en unités mineures (paise)
    currency: str = Field(default="INR", max_length=3)
    is_active: bool = Field(default=True, index=True)

    __tablename__ = "products"
