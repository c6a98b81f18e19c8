"""Tests for the health-check canary's rolling probe window."""

import asyncio
import re
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest
import pytz

from core.discord_outbound.transport import DiscordTransport
from core.errors import ConsistencyError
from core.health.canary import PROBE_WINDOW, HealthCheckCanary

CHANNEL = 555


def _canary(transport, **kwargs):
    return HealthCheckCanary(transport, CHANNEL, **kwargs)


async def _run(canary, cycles):
    return [await canary.probe() for _ in range(cycles)]


class TestProbeMessage:
    @pytest.mark.asyncio
    async def test_sends_timestamped_probe_silently(self, fake_transport):
        canary = _canary(fake_transport, tz=pytz.timezone("Asia/Singapore"))
        assert await canary.probe() is True

        destination, text, options = fake_transport.sent[0]
        assert destination == CHANNEL
        assert re.fullmatch(r"Health Check-`\d{14}`", text)
        assert options == {"silent": True}

    def test_timecode_uses_configured_timezone(self, fake_transport):
        canary = _canary(fake_transport, tz=pytz.timezone("Asia/Singapore"))
        with patch("core.health.canary.datetime") as mock_dt:
            mock_dt.now.return_value.strftime.return_value = "20240101080000"
            assert canary._timecode() == "20240101080000"
        mock_dt.now.assert_called_once_with(canary.tz)


class TestProbeWindow:
    @pytest.mark.asyncio
    async def test_filling_window_deletes_nothing(self, fake_transport):
        canary = _canary(fake_transport)
        results = await _run(canary, PROBE_WINDOW)

        assert results == [True] * PROBE_WINDOW
        assert fake_transport.deleted == []
        assert len(canary.outstanding) == PROBE_WINDOW

    @pytest.mark.asyncio
    async def test_fifteen_cycles_delete_five_oldest(self, fake_transport):
        canary = _canary(fake_transport)
        results = await _run(canary, 15)

        sent_ids = list(range(1000, 1015))
        assert results == [True] * 15
        assert [message_id for _, message_id in fake_transport.deleted] == sent_ids[:5]
        assert canary.outstanding == sent_ids[5:]

    @pytest.mark.asyncio
    async def test_window_never_exceeds_capacity(self, fake_transport):
        canary = _canary(fake_transport)
        for _ in range(40):
            await canary.probe()
            assert len(canary.outstanding) <= PROBE_WINDOW

    @pytest.mark.asyncio
    async def test_send_failure_leaves_window_unchanged(self, fake_transport):
        canary = _canary(fake_transport)
        await _run(canary, 3)
        before = canary.outstanding

        fake_transport.fail_send = {CHANNEL}
        assert await canary.probe() is False
        assert canary.outstanding == before
        assert canary.last_result is False

    @pytest.mark.asyncio
    async def test_send_failure_at_capacity_deletes_nothing(self, fake_transport):
        canary = _canary(fake_transport)
        await _run(canary, PROBE_WINDOW)

        fake_transport.fail_send = {CHANNEL}
        assert await canary.probe() is False
        assert fake_transport.deleted == []
        assert len(canary.outstanding) == PROBE_WINDOW

    @pytest.mark.asyncio
    async def test_delete_failure_reports_unhealthy(self, fake_transport):
        canary = _canary(fake_transport)
        await _run(canary, PROBE_WINDOW)

        fake_transport.fail_all_deletes = True
        assert await canary.probe() is False
        # The probe itself was sent and is tracked
        assert len(canary.outstanding) == PROBE_WINDOW
        assert canary.outstanding[-1] == 1000 + PROBE_WINDOW

    @pytest.mark.asyncio
    async def test_recovers_after_delete_failure(self, fake_transport):
        canary = _canary(fake_transport)
        await _run(canary, PROBE_WINDOW)

        fake_transport.fail_all_deletes = True
        assert await canary.probe() is False
        fake_transport.fail_all_deletes = False
        assert await canary.probe() is True
        assert canary.last_result is True

    @pytest.mark.asyncio
    async def test_empty_pop_at_capacity_is_a_consistency_error(self, fake_transport, caplog):
        canary = _canary(fake_transport)
        await _run(canary, PROBE_WINDOW)

        with patch.object(
            canary, "_pop_oldest", side_effect=ConsistencyError("queue empty")
        ):
            assert await canary.probe() is False

        assert "queue empty" in caplog.text
        assert fake_transport.deleted == []

    @pytest.mark.asyncio
    async def test_connection_reset_reports_unhealthy(self, fake_transport):
        canary = _canary(fake_transport)
        assert await canary.probe() is True

        channel = MagicMock()
        channel.send = AsyncMock(
            side_effect=aiohttp.ClientOSError(104, "Connection reset by peer")
        )
        client = MagicMock()
        client.get_channel.return_value = channel
        canary.transport = DiscordTransport(client)

        assert await canary.probe() is False
        assert canary.last_result is False

    @pytest.mark.asyncio
    async def test_unexpected_error_still_records_failure(self, fake_transport):
        canary = _canary(fake_transport)
        assert await canary.probe() is True

        fake_transport.send = AsyncMock(side_effect=RuntimeError("boom"))
        with pytest.raises(RuntimeError):
            await canary.probe()
        assert canary.last_result is False

    def test_pop_from_empty_queue_raises(self, fake_transport):
        with pytest.raises(ConsistencyError):
            _canary(fake_transport)._pop_oldest()

    @pytest.mark.asyncio
    async def test_concurrent_probes_are_serialized(self, fake_transport):
        class YieldingTransport(type(fake_transport)):
            async def send(self, destination, text, **format_options):
                await asyncio.sleep(0)
                return await super().send(destination, text, **format_options)

            async def delete(self, destination, message_id):
                await asyncio.sleep(0)
                await super().delete(destination, message_id)

        transport = YieldingTransport()
        canary = _canary(transport)
        results = await asyncio.gather(*(canary.probe() for _ in range(15)))

        assert results == [True] * 15
        assert len(transport.deleted) == 5
        assert len(canary.outstanding) == PROBE_WINDOW


class TestDisabledCanary:
    @pytest.mark.asyncio
    async def test_feature_flag_off(self, fake_transport):
        canary = _canary(fake_transport, enabled=False)
        assert await canary.probe() is None
        assert fake_transport.sent == []
        assert canary.last_result is None

    @pytest.mark.asyncio
    async def test_no_destination(self, fake_transport):
        canary = HealthCheckCanary(fake_transport, None)
        assert canary.enabled is False
        assert await canary.probe() is None

    @pytest.mark.asyncio
    async def test_no_transport(self):
        assert await HealthCheckCanary(None, CHANNEL).probe() is None

    @pytest.mark.asyncio
    async def test_unreachable_destination_disables(self, fake_transport):
        fake_transport.unreachable = {CHANNEL}
        canary = _canary(fake_transport)

        assert await canary.verify_destination() is False
        assert canary.enabled is False
        assert await canary.probe() is None

    @pytest.mark.asyncio
    async def test_reachable_destination_stays_enabled(self, fake_transport):
        canary = _canary(fake_transport)
        assert await canary.verify_destination() is True
        assert canary.enabled is True
