# storefront/models/storage.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field, Column, Text


class StorageEntry(SQLModel, table=True):
    """
    One key of a client's local storage.

    Identity:
      - namespace: the client id (one browser/device)
      - key: storage key owned by exactly one component

    The value is the JSON text written by LocalStorage, including the
    schema envelope. Rows are overwritten as full snapshots; concurrent
    writers for the same (namespace, key) are last-write-wins.
    """

    __tablename__ = "local_storage"

    namespace: str = Field(
        primary_key=True,
        max_length=64,
        description="Client id owning this key",
    )

    key: str = Field(
        primary_key=True,
        max_length=100,
    )

    value: str = Field(
        sa_column=Column(Text, nullable=False),
        description="JSON-encoded envelope",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last write timestamp (UTC)",
    )
