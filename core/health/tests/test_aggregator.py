"""Tests for the composite health report."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from core.health.aggregator import HealthReport, HealthSignals, check_health
from core.health.canary import HealthCheckCanary
from core.health.flags import LivenessFlag, StatusFlag


@pytest.fixture
def signals(fake_transport):
    return HealthSignals(
        liveness=LivenessFlag(),
        notifier=StatusFlag("notifier"),
        audit=StatusFlag("audit"),
        canary=HealthCheckCanary(fake_transport, 555),
        transport=fake_transport,
        ping=AsyncMock(),
    )


class TestHealthReport:
    def test_all_ok_is_healthy(self):
        report = HealthReport()
        assert report.is_healthy is True
        assert report.status_code == 200

    def test_any_error_is_unhealthy(self):
        report = HealthReport(audit="error: audit run failed")
        assert report.is_healthy is False
        assert report.status_code == 503

    def test_to_dict(self):
        assert HealthReport(bot="error: x").to_dict() == {
            "database": "ok",
            "notifier": "ok",
            "audit": "ok",
            "bot": "error: x",
        }


class TestCheckHealth:
    @pytest.mark.asyncio
    async def test_everything_ok(self, signals):
        report = await check_health(signals)
        assert report == HealthReport()

    @pytest.mark.asyncio
    async def test_database_down_does_not_mask_other_checks(self, signals):
        signals.ping = AsyncMock(side_effect=OSError("connection refused"))

        report = await check_health(signals)

        assert report.database == "error: connection refused"
        assert report.notifier == "ok"
        assert report.audit == "ok"
        assert report.bot == "ok"
        assert report.status_code == 503

    @pytest.mark.asyncio
    async def test_database_error_without_message_uses_type(self, signals):
        signals.ping = AsyncMock(side_effect=TimeoutError())
        report = await check_health(signals)
        assert report.database == "error: TimeoutError"

    @pytest.mark.asyncio
    async def test_uses_database_ping_by_default(self, signals, monkeypatch):
        ping = AsyncMock()
        monkeypatch.setattr("core.database.ping", ping)
        signals.ping = None

        await check_health(signals)
        ping.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_notifier_requires_connected_transport(self, signals, fake_transport):
        fake_transport.ready = False
        report = await check_health(signals)
        assert report.notifier.startswith("error")
        assert report.bot == "ok"

    @pytest.mark.asyncio
    async def test_notifier_without_bot(self, signals):
        signals.transport = None
        report = await check_health(signals)
        assert report.notifier.startswith("error")

    @pytest.mark.asyncio
    async def test_notifier_flag(self, signals):
        signals.notifier.set(False)
        report = await check_health(signals)
        assert report.notifier == "error: scheduled reminder run failed"

    @pytest.mark.asyncio
    async def test_audit_flag(self, signals):
        signals.audit.set(False)
        report = await check_health(signals)
        assert report.audit == "error: audit run failed"
        assert report.database == "ok"

    @pytest.mark.asyncio
    async def test_liveness_failure(self, signals):
        signals.liveness.mark_unhealthy()
        report = await check_health(signals)
        assert report.bot == "error: update listener reported an error"

    @pytest.mark.asyncio
    async def test_failed_probe_marks_bot_unhealthy(self, signals, fake_transport):
        fake_transport.fail_send = {555}
        await signals.canary.probe()

        report = await check_health(signals)
        assert report.bot == "error: health check probe failed"
        # The canary never writes the liveness flag
        assert signals.liveness.is_healthy() is True

    @pytest.mark.asyncio
    async def test_disabled_canary_does_not_change_bot_status(self, signals):
        signals.canary.enabled = False
        await signals.canary.probe()
        report = await check_health(signals)
        assert report.bot == "ok"

    @pytest.mark.asyncio
    async def test_crashing_check_is_contained(self, signals):
        signals.audit = MagicMock()
        signals.audit.is_healthy.side_effect = RuntimeError("boom")

        report = await check_health(signals)

        assert report.audit == "error: boom"
        assert report.database == "ok"
        assert report.notifier == "ok"
        assert report.bot == "ok"

    @pytest.mark.asyncio
    async def test_does_not_mutate_signals(self, signals):
        signals.notifier.set(False)
        await check_health(signals)
        await check_health(signals)
        assert signals.notifier.is_healthy() is False
        assert signals.liveness.is_healthy() is True
        assert signals.audit.is_healthy() is True
