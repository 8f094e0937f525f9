"""
app/domain/provider.py

Provider records as fetched from sources and as stored.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class SourceRecord:
    """
    One provider as returned by a single fetch.

    `synthetic` marks placeholder seed data produced when a source was
    unreachable; such records are never authoritative.
    """

    name: str
    price: float = 0.0
    rating: float = 3.5
    description: str = ""
    external_url: str = ""
    organization_number: str | None = None
    logo_url: str | None = None
    pros: tuple[str, ...] = ()
    cons: tuple[str, ...] = ()
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    synthetic: bool = False

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("SourceRecord.name must be a non-empty string.")
        if self.price < 0:
            raise ValueError(f"SourceRecord.price must be >= 0, got {self.price}.")
        if not 0.0 <= self.rating <= 5.0:
            raise ValueError(f"SourceRecord.rating must be within [0, 5], got {self.rating}.")


@dataclass(frozen=True)
class StoredProvider:
    """
    Persisted provider identified by (name, category).
    """

    id: uuid.UUID
    name: str
    category: str
    price: float
    rating: float
    description: str
    external_url: str
    organization_number: str | None = None
    logo_url: str | None = None
    pros: tuple[str, ...] = ()
    cons: tuple[str, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None
