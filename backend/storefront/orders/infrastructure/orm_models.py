from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel


class OrderRecord(SQLModel, table=True):
    """Modèle de table pour les commandes.

    Les montants sont stockés en unités mineures (entiers) pour être relus à
    l'identique; les lignes et l'adresse sont des copies figées (JSON).
    """
    id: str = Field(primary_key=True, max_length=36)

    # Client (utilisateur enregistré ou invité dénormalisé)
    customer_user_id: Optional[str] = Field(default=None, index=True, max_length=64)
    customer_name: Optional[str] = Field(default=None, max_length=255)
    customer_email: Optional[str] = Field(default=None, max_length=255)
    customer_phone: Optional[str] = Field(default=None, max_length=50)

    items: List[Dict[str, Any]] = Field(sa_column=Column(JSON, nullable=False))
    delivery_address: Dict[str, Any] = Field(sa_column=Column(JSON, nullable=False))
    payment_method: str = Field(default="cod", max_length=20)
    payment_reference: Optional[str] = Field(default=None)

    # Détail de prix figé
    currency: str = Field(default="INR", max_length=3)
    config_version: str = Field(index=True, max_length=100)
    subtotal_minor: int
    discount_minor: int
    delivery_charge_minor: int
    handling_fee_minor: int
    handling_fee_override_minor: Optional[int] = Field(default=None)
    tax_minor: int
    tax_half_a_minor: Optional[int] = Field(default=None)
    tax_half_b_minor: Optional[int] = Field(default=None)
    total_minor: int
    deferred_delivery_note: bool = Field(default=False)
    is_discount_region: bool = Field(default=False)
    discount_rate: str = Field(default="0", max_length=20) # Decimal sérialisé
    tax_model: Dict[str, Any] = Field(sa_column=Column(JSON, nullable=False))

    # Exécution (seuls champs modifiables après création)
    order_status: str = Field(default="pending", max_length=20, index=True)
    shipping_status: str = Field(default="pending", max_length=20, index=True)
    courier_name: Optional[str] = Field(default=None, max_length=255)
    courier_contact: Optional[str] = Field(default=None, max_length=255)
    tracking_id: Optional[str] = Field(default=None, max_length=255)

    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False, index=True))
    updated_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    version: int = Field(default=1)

    __tablename__ = "orders"
