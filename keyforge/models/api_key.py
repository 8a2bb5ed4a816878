"""API Key data model.

``ApiKeyRow`` is the persisted table. Plaintext secrets are never stored, only
their SHA-256 hash and the masked display form computed at creation.

``ApiKey`` is the typed record handed to callers. Every row read from the row
store is validated into it at the repository boundary.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

from keyforge.keys import expiry
from keyforge.utils.datetime import utcnow

API_KEYS_TABLE = "api_keys"


def _new_id() -> str:
    return str(uuid.uuid4())


class ApiKeyRow(SQLModel, table=True):
    """Persisted API key row, owner-scoped via owner_id."""

    __tablename__ = API_KEYS_TABLE

    id: str = Field(default_factory=_new_id, primary_key=True, max_length=36)
    owner_id: str = Field(index=True)
    name: str = Field(max_length=255)
    secret_hash: str = Field(index=True, unique=True)  # SHA-256 hex digest
    masked_secret: str = Field()  # e.g. "sk-a**********"
    is_active: bool = Field(default=True)
    # Naive UTC throughout; see keyforge.utils.datetime
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=False), nullable=False),
    )
    expires_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=False), nullable=True),
    )  # None = never expires


class ApiKey(BaseModel):
    """API key record.

    ``secret`` is only populated on the record returned by create; records read
    back from the store carry ``masked_secret`` alone.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    owner_id: str
    name: str
    masked_secret: str
    is_active: bool
    created_at: datetime
    expires_at: datetime | None = None
    secret: str | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        """Whether the key's expiry has passed (advisory only)."""
        return expiry.is_expired(now or utcnow(), self.expires_at)
