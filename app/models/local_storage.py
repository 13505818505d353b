# app/models/local_storage.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class LocalStorageEntry(SQLModel, table=True):
    """
    One key of the storefront's device storage.

    Values are opaque JSON strings; the whole table is the application's
    key-space and is subject to a single byte quota.
    """

    __tablename__ = "local_storage"

    key: str = Field(
        primary_key=True,
        max_length=200,
    )

    value: str = Field(
        description="Serialized JSON document",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last write timestamp (UTC)",
    )
