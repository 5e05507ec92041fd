"""
Worker Pool - lifecycle of model-backed workers.

Each worker wraps one session handle from an injected AgentSessionFactory.
The pool tracks status, the task currently running and the last outcome,
and emits `completed` / `failed` on the worker's own emitter when a task
settles.
"""

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from ..errors import WorkerNotFoundError
from ..model_router import SHORT_NAMES
from ..models import UserTask, WorkerTier
from ..sessions import AgentSessionFactory
from .events import EventEmitter, SubAgentEventType

logger = logging.getLogger(__name__)


class WorkerStatus(str, Enum):
	"""Status of a worker."""
	IDLE = "idle"
	RUNNING = "running"
	DONE = "done"
	ERROR = "error"


@dataclass
class Worker:
	"""A spawned worker bound to one session."""
	id: str
	tier: WorkerTier
	status: WorkerStatus = WorkerStatus.IDLE
	current_task_id: Optional[str] = None
	spawned_at: str = field(default_factory=lambda: datetime.now().isoformat())
	completed_at: Optional[str] = None
	error: Optional[str] = None
	result: Optional[str] = None
	session: Any = field(default=None, repr=False)
	emitter: EventEmitter = field(default_factory=EventEmitter, repr=False)

	def on(self, event: str, listener) -> None:
		self.emitter.on(event, listener)

	def off(self, event: str, listener) -> None:
		self.emitter.off(event, listener)


class WorkerPool:
	"""
	Spawns, runs and releases workers.

	Worker ids are tier-prefixed counters shared across tiers, e.g.
	haiku-1, sonnet-2, opus-3.
	"""

	def __init__(self, factory: AgentSessionFactory):
		self.factory = factory
		self._workers: dict[str, Worker] = {}
		self._counter = 0

	def _next_id(self, tier: WorkerTier) -> str:
		self._counter += 1
		return f"{SHORT_NAMES[tier]}-{self._counter}"

	async def spawn(self, tier: WorkerTier) -> Worker:
		"""
		Create a worker of the given tier.

		The worker is tracked before the session exists, so a factory
		failure leaves it recorded with status error before re-raising.
		"""
		worker = Worker(id=self._next_id(tier), tier=tier)
		self._workers[worker.id] = worker

		try:
			worker.session = await self.factory.spawn(tier)
		except Exception as e:
			worker.status = WorkerStatus.ERROR
			worker.error = str(e)
			worker.completed_at = datetime.now().isoformat()
			logger.error(f"Failed to spawn {worker.id}: {e}")
			raise

		logger.info(f"Spawned worker {worker.id} ({tier.value})")
		return worker

	async def execute(self, worker_id: str, task: UserTask) -> str:
		"""
		Run a task on a worker.

		Args:
			worker_id: Id returned by spawn()
			task: Task to run

		Returns:
			The worker's output

		Raises:
			WorkerNotFoundError: If the worker is not tracked
		"""
		worker = self._workers.get(worker_id)
		if worker is None:
			raise WorkerNotFoundError(worker_id)

		worker.status = WorkerStatus.RUNNING
		worker.current_task_id = task.id
		worker.error = None
		logger.debug(f"{worker_id} running task {task.id}")

		try:
			output = await self.factory.execute(worker.session, task)
		except Exception as e:
			worker.status = WorkerStatus.ERROR
			worker.current_task_id = None
			worker.error = str(e)
			worker.completed_at = datetime.now().isoformat()
			logger.warning(f"{worker_id} failed task {task.id}: {e}")
			worker.emitter.emit(SubAgentEventType.FAILED.value, str(e), task.id)
			raise
		except asyncio.CancelledError:
			worker.status = WorkerStatus.ERROR
			worker.current_task_id = None
			worker.error = "Canceled"
			worker.completed_at = datetime.now().isoformat()
			logger.debug(f"{worker_id} canceled during task {task.id}")
			raise

		worker.status = WorkerStatus.DONE
		worker.current_task_id = None
		worker.result = output
		worker.completed_at = datetime.now().isoformat()
		logger.debug(f"{worker_id} completed task {task.id}")
		worker.emitter.emit(SubAgentEventType.COMPLETED.value, output, task.id)
		return output

	async def interrupt(self, worker_id: str) -> bool:
		"""Ask a running worker to stop. Never raises."""
		worker = self._workers.get(worker_id)
		if worker is None or worker.status != WorkerStatus.RUNNING:
			return False

		try:
			return bool(await self.factory.interrupt(worker.session))
		except Exception as e:
			logger.warning(f"Interrupt of {worker_id} failed: {e}")
			return False

	async def terminate(self, worker_id: str) -> None:
		"""Release a worker's session and forget it."""
		worker = self._workers.pop(worker_id, None)
		if worker is None:
			return

		try:
			await self.factory.terminate(worker.session)
		except Exception as e:
			logger.debug(f"Ignoring terminate error for {worker_id}: {e}")

		worker.emitter.remove_all_listeners()
		logger.debug(f"Terminated worker {worker_id}")

	async def terminate_all(self) -> None:
		for worker_id in list(self._workers):
			await self.interrupt(worker_id)
			await self.terminate(worker_id)

	def get_agent(self, worker_id: str) -> Optional[Worker]:
		return self._workers.get(worker_id)

	def get_all_agents(self) -> list[Worker]:
		return list(self._workers.values())

	def get_agents_by_status(self, status: WorkerStatus) -> list[Worker]:
		return [w for w in self._workers.values() if w.status == status]

	def get_agents_by_tier(self, tier: WorkerTier) -> list[Worker]:
		return [w for w in self._workers.values() if w.tier == tier]

	def get_stats(self) -> dict:
		"""Counts of tracked workers, by status and by tier."""
		workers = self._workers.values()
		by_status = Counter(w.status.value for w in workers)
		by_tier = Counter(w.tier.value for w in workers)
		return {
			"total": len(self._workers),
			"by_status": {s.value: by_status.get(s.value, 0) for s in WorkerStatus},
			"by_tier": {t.value: by_tier.get(t.value, 0) for t in WorkerTier},
		}
