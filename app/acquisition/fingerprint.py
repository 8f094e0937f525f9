"""
app/acquisition/fingerprint.py

Content fingerprints for change detection between fetches.

A fingerprint is stable for records that are equal after normalization,
so re-fetching unchanged data yields the same digest regardless of which
source produced it.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from app.domain.provider import SourceRecord


def fingerprint_fields(record: SourceRecord) -> dict[str, Any]:
    """
    Normalized fields that participate in the fingerprint.

    Contact details, logo and pros/cons do not participate.
    """

    return {
        "name": record.name.strip().lower(),
        "price": float(record.price),
        "rating": float(record.rating),
        "description": record.description.strip().lower(),
        "external_url": record.external_url.strip(),
        "organization_number": (record.organization_number or "").strip(),
    }


def compute_fingerprint(record: SourceRecord) -> str:
    """
    Compute the SHA-256 content fingerprint of a record.

    Returns:
        64-character hex SHA-256 digest
    """

    canonical = json.dumps(
        fingerprint_fields(record),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
