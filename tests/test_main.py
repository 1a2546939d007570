"""
Unit tests for the application lifespan helpers.
"""
import asyncio
import logging
import pytest
from main import drain_startup_tasks, log_new_batch
from firesync.state import UpdateNotification


class TestDrainStartupTasks:
	"""Test cases for drain_startup_tasks."""

	@pytest.mark.asyncio
	async def test_failed_task_is_logged(self, caplog):
		async def failing():
			raise RuntimeError("geocoder exploded")

		task = asyncio.create_task(failing(), name="locate-observer")
		await asyncio.sleep(0)

		with caplog.at_level(logging.ERROR):
			await drain_startup_tasks([task])

		assert "Startup task locate-observer failed: geocoder exploded" in caplog.text

	@pytest.mark.asyncio
	async def test_pending_task_is_cancelled_quietly(self, caplog):
		release = asyncio.Event()
		task = asyncio.create_task(release.wait(), name="sync-start")
		await asyncio.sleep(0)

		with caplog.at_level(logging.ERROR):
			await drain_startup_tasks([task])

		assert task.cancelled()
		assert "failed" not in caplog.text


def test_log_new_batch(caplog):
	notification = UpdateNotification(
		previous_timestamp="2025-07-01T11:00:00Z",
		batch_timestamp="2025-07-01T12:00:00Z",
		record_count=8
	)

	with caplog.at_level(logging.INFO):
		log_new_batch(notification)

	assert "New fire risk batch 2025-07-01T12:00:00Z (8 records)" in caplog.text
