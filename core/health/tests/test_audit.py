"""Tests for the scheduled reminder audit."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.dialects import postgresql

from core.health.audit import audit_data, orphaned_notifications_query, run_audit
from core.health.flags import StatusFlag


def _patch_transaction(conn):
    patcher = patch("core.health.audit.get_transaction")
    mock_tx = patcher.start()
    mock_tx.return_value.__aenter__.return_value = conn
    mock_tx.return_value.__aexit__.return_value = False
    return patcher


def _select_result(ids):
    result = MagicMock()
    result.scalars.return_value.all.return_value = ids
    return result


class TestOrphanedNotificationsQuery:
    def test_either_missing_side_counts_only_for_valid_reminders(self):
        sql = str(orphaned_notifications_query().compile(dialect=postgresql.dialect()))

        assert "scheduled_notifications.is_valid IS true AND" in sql
        assert (
            "(availability.availability_id IS NULL OR users.user_id IS NULL)" in sql
        )
        assert "LEFT OUTER JOIN availability" in sql
        assert "LEFT OUTER JOIN users" in sql


class TestAuditData:
    @pytest.mark.asyncio
    async def test_invalidates_orphaned_reminders(self):
        conn = MagicMock()
        conn.execute = AsyncMock(side_effect=[_select_result([4, 9]), MagicMock()])
        patcher = _patch_transaction(conn)
        try:
            assert await audit_data() == [4, 9]
        finally:
            patcher.stop()

        update_sql = str(conn.execute.call_args_list[1][0][0])
        assert update_sql.startswith("UPDATE scheduled_notifications")

    @pytest.mark.asyncio
    async def test_nothing_to_invalidate(self):
        conn = MagicMock()
        conn.execute = AsyncMock(return_value=_select_result([]))
        patcher = _patch_transaction(conn)
        try:
            assert await audit_data() == []
        finally:
            patcher.stop()

        conn.execute.assert_awaited_once()


class TestRunAudit:
    @pytest.mark.asyncio
    async def test_success_sets_flag_healthy(self):
        flag = StatusFlag("audit", healthy=False)
        with patch("core.health.audit.audit_data", AsyncMock(return_value=[])):
            await run_audit(flag)
        assert flag.is_healthy() is True

    @pytest.mark.asyncio
    async def test_failure_sets_flag_unhealthy(self):
        flag = StatusFlag("audit")
        with patch(
            "core.health.audit.audit_data", AsyncMock(side_effect=OSError("refused"))
        ):
            with patch("core.health.audit.sentry_sdk") as mock_sentry:
                await run_audit(flag)

        assert flag.is_healthy() is False
        mock_sentry.capture_exception.assert_called_once()
