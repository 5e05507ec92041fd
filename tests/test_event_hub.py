"""Tests for the event hub."""

import asyncio

import pytest

from fastmode.orchestrator.events import EventEmitter, EventHub, SubAgentEvent, SubAgentEventType
from fastmode.orchestrator.pool import Worker
from fastmode.models import WorkerTier


def make_worker(worker_id: str = "sonnet-1") -> Worker:
	return Worker(id=worker_id, tier=WorkerTier.STANDARD)


class TestSubscribe:
	"""Worker subscriptions."""

	def test_completed_and_failed_are_republished(self):
		hub = EventHub()
		worker = make_worker()
		seen = []
		hub.on("event", seen.append)

		hub.subscribe(worker.id, worker)
		worker.emitter.emit("completed", "all good", "t1")
		worker.emitter.emit("failed", "broke", "t2")

		assert seen == [
			SubAgentEvent(type=SubAgentEventType.COMPLETED, agent_id="sonnet-1", task_id="t1", result="all good"),
			SubAgentEvent(type=SubAgentEventType.FAILED, agent_id="sonnet-1", task_id="t2", error="broke"),
		]

	def test_subscribe_twice_is_noop(self):
		"""A second subscribe should not double-deliver events."""
		hub = EventHub()
		worker = make_worker()
		seen = []
		hub.on("event", seen.append)

		hub.subscribe(worker.id, worker)
		hub.subscribe(worker.id, worker)
		worker.emitter.emit("completed", "once", "t1")

		assert len(seen) == 1
		assert worker.emitter.listener_count("completed") == 1

	def test_unsubscribe(self):
		hub = EventHub()
		worker = make_worker()
		seen = []
		hub.on("event", seen.append)

		hub.subscribe(worker.id, worker)
		assert hub.is_subscribed(worker.id)
		hub.unsubscribe(worker.id)
		worker.emitter.emit("completed", "ignored", "t1")

		assert seen == []
		assert not hub.is_subscribed(worker.id)
		assert hub.get_subscribed_agents() == []

	def test_delivery_order_is_publish_order(self):
		hub = EventHub()
		first, second = make_worker("haiku-1"), make_worker("sonnet-2")
		seen = []
		hub.on("event", lambda e: seen.append(e.agent_id))
		hub.subscribe(first.id, first)
		hub.subscribe(second.id, second)

		second.emitter.emit("completed", "b", "t2")
		first.emitter.emit("completed", "a", "t1")
		second.emitter.emit("failed", "c", "t3")

		assert seen == ["sonnet-2", "haiku-1", "sonnet-2"]

	def test_no_replay_for_late_listeners(self):
		hub = EventHub()
		worker = make_worker()
		hub.subscribe(worker.id, worker)
		worker.emitter.emit("completed", "early", "t1")

		late = []
		hub.on("event", late.append)
		assert late == []

	def test_clear_drops_everything(self):
		hub = EventHub()
		worker = make_worker()
		seen = []
		hub.on("event", seen.append)
		hub.subscribe(worker.id, worker)

		hub.clear()
		worker.emitter.emit("completed", "x", "t1")

		assert seen == []
		assert hub.get_subscribed_agents() == []
		assert hub.listener_count("event") == 0

	def test_failing_listener_does_not_block_others(self):
		hub = EventHub()
		worker = make_worker()
		seen = []

		def broken(event):
			raise ValueError("listener bug")

		hub.on("event", broken)
		hub.on("event", seen.append)
		hub.subscribe(worker.id, worker)
		worker.emitter.emit("completed", "x", "t1")

		assert len(seen) == 1


class TestAggregate:
	"""Async iteration over the event stream."""

	@pytest.mark.asyncio
	async def test_aggregate_yields_new_events(self):
		hub = EventHub()
		worker = make_worker()
		hub.subscribe(worker.id, worker)

		stream = hub.aggregate()
		pending = asyncio.ensure_future(stream.__anext__())
		await asyncio.sleep(0)

		worker.emitter.emit("completed", "streamed", "t1")
		event = await asyncio.wait_for(pending, 1.0)

		assert event.result == "streamed"
		await stream.aclose()
		assert hub.listener_count("event") == 0


def test_emitter_off_and_remove_all():
	emitter = EventEmitter()
	calls = []

	def listener(value):
		calls.append(value)

	emitter.on("x", listener)
	assert emitter.emit("x", 1) is True
	emitter.off("x", listener)
	assert emitter.emit("x", 2) is False

	emitter.on("x", listener)
	emitter.on("y", listener)
	emitter.remove_all_listeners("x")
	assert emitter.listener_count("x") == 0
	assert emitter.listener_count("y") == 1
	emitter.remove_all_listeners()
	assert emitter.listener_count("y") == 0
	assert calls == [1]
