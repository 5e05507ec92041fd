"""
Event plumbing - listener registries and the event hub.

Workers notify `completed` / `failed` on their own emitter. The EventHub
subscribes to those and republishes each notification as a uniform
SubAgentEvent on its `event` channel, so the coordinator has one place to
listen instead of wiring callbacks per worker.
"""

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Callable, Optional

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class EventEmitter:
	"""Named-event listener registry with synchronous, in-order delivery."""

	def __init__(self):
		self._listeners: dict[str, list[Listener]] = defaultdict(list)

	def on(self, event: str, listener: Listener) -> None:
		self._listeners[event].append(listener)

	def off(self, event: str, listener: Listener) -> None:
		listeners = self._listeners.get(event)
		if listeners and listener in listeners:
			listeners.remove(listener)

	def emit(self, event: str, *args: Any) -> bool:
		"""Call every listener of an event. Returns True if any were registered."""
		listeners = list(self._listeners.get(event, ()))
		for listener in listeners:
			try:
				listener(*args)
			except Exception as e:
				logger.error(f"Listener for '{event}' failed: {e}")
		return bool(listeners)

	def listener_count(self, event: str) -> int:
		return len(self._listeners.get(event, ()))

	def remove_all_listeners(self, event: Optional[str] = None) -> None:
		if event is None:
			self._listeners.clear()
		else:
			self._listeners.pop(event, None)


class SubAgentEventType(str, Enum):
	"""Terminal notifications a worker publishes."""
	COMPLETED = "completed"
	FAILED = "failed"


@dataclass(frozen=True)
class SubAgentEvent:
	"""One worker notification, as seen by hub subscribers."""
	type: SubAgentEventType
	agent_id: str
	task_id: Optional[str] = None
	result: Optional[str] = None
	error: Optional[str] = None


class EventHub(EventEmitter):
	"""
	Fans worker notifications into a single `event` stream.

	There is no buffering: a subscriber only sees events published after it
	registered.
	"""

	EVENT = "event"

	def __init__(self):
		super().__init__()
		# worker id -> (emitter, on_completed, on_failed)
		self._subscriptions: dict[str, tuple[EventEmitter, Listener, Listener]] = {}

	def subscribe(self, agent_id: str, worker) -> None:
		"""
		Attach to a worker's completed/failed notifications.

		Args:
			agent_id: Worker id used to tag republished events
			worker: Anything exposing an `emitter` (or itself an EventEmitter)
		"""
		if agent_id in self._subscriptions:
			return

		emitter: EventEmitter = getattr(worker, "emitter", worker)

		def on_completed(result: Optional[str] = None, task_id: Optional[str] = None) -> None:
			self.publish(SubAgentEvent(
				type=SubAgentEventType.COMPLETED,
				agent_id=agent_id,
				task_id=task_id,
				result=result,
			))

		def on_failed(error: Optional[str] = None, task_id: Optional[str] = None) -> None:
			self.publish(SubAgentEvent(
				type=SubAgentEventType.FAILED,
				agent_id=agent_id,
				task_id=task_id,
				error=error,
			))

		emitter.on(SubAgentEventType.COMPLETED.value, on_completed)
		emitter.on(SubAgentEventType.FAILED.value, on_failed)
		self._subscriptions[agent_id] = (emitter, on_completed, on_failed)
		logger.debug(f"Subscribed to {agent_id}")

	def unsubscribe(self, agent_id: str) -> None:
		subscription = self._subscriptions.pop(agent_id, None)
		if subscription is None:
			return
		emitter, on_completed, on_failed = subscription
		emitter.off(SubAgentEventType.COMPLETED.value, on_completed)
		emitter.off(SubAgentEventType.FAILED.value, on_failed)

	def is_subscribed(self, agent_id: str) -> bool:
		return agent_id in self._subscriptions

	def get_subscribed_agents(self) -> list[str]:
		return list(self._subscriptions)

	def publish(self, event: SubAgentEvent) -> None:
		self.emit(self.EVENT, event)

	def clear(self) -> None:
		"""Drop every worker subscription and every listener."""
		for agent_id in list(self._subscriptions):
			self.unsubscribe(agent_id)
		self.remove_all_listeners()

	async def aggregate(self) -> AsyncIterator[SubAgentEvent]:
		"""Yield events published after iteration starts, until the consumer stops."""
		queue: asyncio.Queue[SubAgentEvent] = asyncio.Queue()
		self.on(self.EVENT, queue.put_nowait)
		try:
			while True:
				yield await queue.get()
		finally:
			self.off(self.EVENT, queue.put_nowait)
