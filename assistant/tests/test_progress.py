"""
Tests for progress reporting.
"""

import asyncio
import logging

import pytest
from pydantic import ValidationError

from assistant.orchestration.progress import STAGE_PROGRESS, ProgressReporter


class TestProgressReporter:
    """Tests for ProgressReporter."""

    def test_events_are_recorded_with_stage_progress(self):
        reporter = ProgressReporter("req-1")

        reporter.report("analysis", "Starting analysis phase...")
        event = reporter.report("web-research", "Performing web research...", {"urls": 2})

        assert [e.stage for e in reporter.history] == ["analysis", "web-research"]
        assert event.progress == STAGE_PROGRESS["web-research"]
        assert event.details == {"urls": 2}
        assert event.model_dump(by_alias=True)["requestId"] == "req-1"

    def test_events_are_immutable(self):
        event = ProgressReporter("req-1").report("completed", "done")

        with pytest.raises(ValidationError):
            event.message = "changed"

    def test_sync_listener_called_in_order(self):
        received = []
        reporter = ProgressReporter("req-1", listener=lambda e: received.append(e.stage))

        reporter.report("analysis", "a")
        reporter.report("completed", "b")

        assert received == ["analysis", "completed"]

    def test_sync_listener_failure_is_swallowed(self, caplog):
        def listener(event):
            raise RuntimeError("socket closed")

        reporter = ProgressReporter("req-1", listener=listener)

        with caplog.at_level(logging.WARNING):
            reporter.report("analysis", "a")

        assert len(reporter.history) == 1
        assert "socket closed" in caplog.text

    @pytest.mark.asyncio
    async def test_async_listener_failure_is_logged(self, caplog):
        async def listener(event):
            raise RuntimeError("queue full")

        reporter = ProgressReporter("req-1", listener=listener)

        with caplog.at_level(logging.WARNING):
            reporter.report("analysis", "a")
            await asyncio.sleep(0)
            await asyncio.sleep(0)

        assert "queue full" in caplog.text

    @pytest.mark.asyncio
    async def test_slow_async_listener_does_not_block(self):
        release = asyncio.Event()
        received = []

        async def listener(event):
            await release.wait()
            received.append(event.stage)

        reporter = ProgressReporter("req-1", listener=listener)
        reporter.report("analysis", "a")

        assert received == []
        release.set()
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert received == ["analysis"]

    def test_async_listener_without_loop_is_dropped(self, caplog):
        async def listener(event):
            pass

        reporter = ProgressReporter("req-1", listener=listener)

        with caplog.at_level(logging.WARNING):
            reporter.report("analysis", "a")

        assert len(reporter.history) == 1
        assert "not scheduled" in caplog.text
