from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel


class PolicyConfigRecord(SQLModel, table=True):
    """Version de configuration tarifaire, stockée telle quelle (JSON)."""
    version: str = Field(primary_key=True, max_length=100)
    payload: Dict[str, Any] = Field(sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    __tablename__ = "pricing_policies"
