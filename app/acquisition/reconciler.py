"""
app/acquisition/reconciler.py

Reconcile fetched records against stored providers.

Records are matched on (name, category). A content fingerprint decides
between a cheap duplicate skip and an update; store failures mark one
record as failed without stopping the rest.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable

from app.acquisition.errors import StoreError
from app.acquisition.fingerprint import compute_fingerprint
from app.acquisition.logging_utils import log_event
from app.acquisition.store.base import AcquisitionStore
from app.domain.execution import ReconcileAction, ReconcileOutcome
from app.domain.provider import SourceRecord, StoredProvider

logger = logging.getLogger(__name__)


class Reconciler:
    def __init__(self, *, store: AcquisitionStore) -> None:
        self._store = store

    def reconcile(
        self,
        records: Iterable[SourceRecord],
        *,
        category: str,
        endpoint_id: uuid.UUID | None,
    ) -> list[ReconcileOutcome]:
        """
        Reconcile each record in its own unit of work, in input order.
        """

        outcomes: list[ReconcileOutcome] = []
        for record in records:
            outcome = self.reconcile_one(record, category=category, endpoint_id=endpoint_id)
            outcomes.append(outcome)
        return outcomes

    def reconcile_one(
        self,
        record: SourceRecord,
        *,
        category: str,
        endpoint_id: uuid.UUID | None,
    ) -> ReconcileOutcome:
        fingerprint = compute_fingerprint(record)
        if record.synthetic:
            return ReconcileOutcome(
                name=record.name,
                category=category,
                action=ReconcileAction.FAILED,
                fingerprint=fingerprint,
                error="Synthetic records are not persisted.",
            )

        try:
            with self._store.unit_of_work():
                action, provider_id = self._apply(
                    record,
                    category=category,
                    fingerprint=fingerprint,
                    endpoint_id=endpoint_id,
                )
        except StoreError as exc:
            log_event(
                logger,
                logging.ERROR,
                "provider_reconcile_failed",
                category=category,
                provider=record.name,
                endpoint_id=endpoint_id,
                error=str(exc),
            )
            return ReconcileOutcome(
                name=record.name,
                category=category,
                action=ReconcileAction.FAILED,
                fingerprint=fingerprint,
                error=str(exc),
            )

        log_event(
            logger,
            logging.DEBUG,
            "provider_reconciled",
            category=category,
            provider=record.name,
            action=action,
            endpoint_id=endpoint_id,
        )
        return ReconcileOutcome(
            name=record.name,
            category=category,
            action=action,
            fingerprint=fingerprint,
            provider_id=provider_id,
        )

    def _apply(
        self,
        record: SourceRecord,
        *,
        category: str,
        fingerprint: str,
        endpoint_id: uuid.UUID | None,
    ) -> tuple[str, uuid.UUID]:
        existing = self._store.find_provider_by_name_and_category(record.name, category)
        if existing is None:
            inserted = self._store.insert_provider(record, category=category)
            if inserted is not None:
                self._store.insert_fingerprint(inserted.id, fingerprint, endpoint_id=endpoint_id)
                return ReconcileAction.INSERTED, inserted.id

            # Lost the insert race to a concurrent run; reconcile against its row.
            existing = self._store.find_provider_by_name_and_category(record.name, category)
            if existing is None:
                raise StoreError(
                    f"Provider '{record.name}' ({category}) conflicted on insert but cannot be read back."
                )

        return self._apply_existing(existing, record, fingerprint=fingerprint, endpoint_id=endpoint_id)

    def _apply_existing(
        self,
        existing: StoredProvider,
        record: SourceRecord,
        *,
        fingerprint: str,
        endpoint_id: uuid.UUID | None,
    ) -> tuple[str, uuid.UUID]:
        if self._store.find_fingerprint(existing.id, fingerprint):
            return ReconcileAction.DUPLICATE, existing.id

        if not self._store.insert_fingerprint(existing.id, fingerprint, endpoint_id=endpoint_id):
            # A concurrent writer recorded the same content first.
            return ReconcileAction.DUPLICATE, existing.id

        self._store.update_provider(existing.id, record)
        return ReconcileAction.UPDATED, existing.id
