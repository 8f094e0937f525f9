"""
app/repositories/endpoint_repository.py

Persistence for provider endpoints and their request statistics.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Float, cast, func, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from app.domain.endpoint import EndpointRegistration
from db.models.provider_endpoint import ENDPOINT_NATURAL_KEY_CONSTRAINT, ProviderEndpoint


class EndpointRepository:
    """
    Repository for provider_endpoints rows.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_active(self, category: str) -> list[ProviderEndpoint]:
        stmt = (
            select(ProviderEndpoint)
            .where(ProviderEndpoint.category == category, ProviderEndpoint.is_active.is_(True))
            .order_by(ProviderEndpoint.priority.asc(), ProviderEndpoint.created_at.asc())
        )
        return list(self._session.scalars(stmt).all())

    def get(self, endpoint_id: uuid.UUID) -> ProviderEndpoint | None:
        return self._session.get(ProviderEndpoint, endpoint_id)

    def record_attempt(self, endpoint_id: uuid.UUID, *, success: bool, timestamp: datetime) -> int:
        """
        Single-statement counter update; the database does the arithmetic
        so concurrent runs cannot lose increments.
        """

        failure_increment = 0 if success else 1
        successes_after = (
            ProviderEndpoint.total_requests - ProviderEndpoint.failure_count + (1 - failure_increment)
        )
        values: dict[str, object] = {
            "total_requests": ProviderEndpoint.total_requests + 1,
            "failure_count": ProviderEndpoint.failure_count + failure_increment,
            "success_rate": cast(successes_after, Float) / (ProviderEndpoint.total_requests + 1),
            "updated_at": func.now(),
        }
        if success:
            values["last_success_at"] = timestamp
        else:
            values["last_failure_at"] = timestamp

        stmt = (
            update(ProviderEndpoint)
            .where(ProviderEndpoint.id == endpoint_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return self._session.execute(stmt).rowcount

    def upsert(self, registration: EndpointRegistration) -> ProviderEndpoint:
        scraping_config = registration.scraping_config.as_dict()
        stmt = (
            insert(ProviderEndpoint)
            .values(
                category=registration.category,
                name=registration.name,
                provider_name=registration.provider_name,
                endpoint_type=registration.kind,
                url=registration.url,
                priority=registration.priority,
                is_active=True,
                auth_required=False,
                scraping_config=scraping_config,
            )
            .on_conflict_do_update(
                constraint=ENDPOINT_NATURAL_KEY_CONSTRAINT,
                set_={
                    "provider_name": registration.provider_name,
                    "endpoint_type": registration.kind,
                    "url": registration.url,
                    "priority": registration.priority,
                    "scraping_config": scraping_config,
                    "updated_at": func.now(),
                },
            )
            .returning(ProviderEndpoint)
        )
        return self._session.scalars(stmt).one()
