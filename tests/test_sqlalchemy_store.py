"""
tests/test_sqlalchemy_store.py

Transaction handling of SQLAlchemyAcquisitionStore over a mocked session.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from unittest import mock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.acquisition.errors import StoreError
from app.acquisition.store.sqlalchemy_store import SQLAlchemyAcquisitionStore
from app.domain.execution import ExecutionLogEntry, ExecutionStatus, ExecutionType


@pytest.fixture()
def session() -> mock.MagicMock:
    return mock.MagicMock()


@pytest.fixture()
def sql_store(session: mock.MagicMock) -> SQLAlchemyAcquisitionStore:
    return SQLAlchemyAcquisitionStore(session=session)


def _entry() -> ExecutionLogEntry:
    return ExecutionLogEntry(
        endpoint_id=uuid.uuid4(),
        execution_type=ExecutionType.MANUAL,
        status=ExecutionStatus.SUCCESS,
    )


class TestSQLAlchemyAcquisitionStore:
    def test_writes_outside_unit_of_work_commit_immediately(self, sql_store, session) -> None:
        sql_store.insert_execution_log(_entry())

        session.add.assert_called_once()
        session.commit.assert_called_once()

    def test_unit_of_work_commits_once(self, sql_store, session) -> None:
        with sql_store.unit_of_work():
            sql_store.insert_execution_log(_entry())
            sql_store.insert_execution_log(_entry())

        session.commit.assert_called_once()
        session.rollback.assert_not_called()

    def test_nested_unit_of_work_commits_at_outermost_level(self, sql_store, session) -> None:
        with sql_store.unit_of_work():
            with sql_store.unit_of_work():
                sql_store.insert_execution_log(_entry())
            session.commit.assert_not_called()

        session.commit.assert_called_once()

    def test_database_errors_roll_back_and_become_store_errors(self, sql_store, session) -> None:
        session.flush.side_effect = SQLAlchemyError("connection lost")

        with pytest.raises(StoreError, match="insert_execution_log failed"):
            sql_store.insert_execution_log(_entry())

        session.rollback.assert_called_once()
        session.commit.assert_not_called()

    def test_other_errors_roll_back_and_propagate(self, sql_store, session) -> None:
        with pytest.raises(KeyError):
            with sql_store.unit_of_work():
                raise KeyError("boom")

        session.rollback.assert_called_once()

    def test_stats_update_for_missing_endpoint_raises(self, sql_store, session) -> None:
        session.execute.return_value.rowcount = 0

        with pytest.raises(StoreError, match="does not exist"):
            sql_store.update_endpoint_stats(uuid.uuid4(), success=True, timestamp=datetime.now(timezone.utc))
