"""Shared test fixtures and helpers for fastmode tests."""

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from fastmode.config import Config
from fastmode.errors import SessionError
from fastmode.models import UserTask, WorkerTier

# Output marker for calls that only settle when interrupted
HANG = object()


@dataclass
class FakeHandle:
	id: str
	tier: WorkerTier
	closed: bool = False


@dataclass
class CallRecord:
	"""One execute() call seen by the fake factory."""
	handle_id: str
	tier: WorkerTier
	task_id: str
	content: str
	started_at: float
	finished_at: Optional[float] = None


@dataclass
class _Rule:
	output: Any
	task_id: Optional[str] = None
	suffix: Optional[str] = None
	tier: Optional[WorkerTier] = None
	delay: float = 0.0

	def matches(self, tier: WorkerTier, task: UserTask) -> bool:
		if self.task_id is not None and task.id != self.task_id:
			return False
		if self.suffix is not None and not task.id.endswith(self.suffix):
			return False
		if self.tier is not None and tier != self.tier:
			return False
		return True


class FakeSessionFactory:
	"""Scripted AgentSessionFactory.

	Outputs are chosen by the first matching rule. An output may be a string,
	an exception instance (raised), a callable taking the task, or HANG.
	"""

	def __init__(self, default: Any = "ok"):
		self.default = default
		self.rules: list[_Rule] = []
		self.calls: list[CallRecord] = []
		self.spawned: list[FakeHandle] = []
		self.interrupted: list[str] = []
		self.terminated: list[str] = []
		self.spawn_error: Optional[Exception] = None
		self.spawn_delay: float = 0.0
		self._hanging: dict[str, asyncio.Event] = {}

	def script(
		self,
		output: Union[str, Exception, Callable[[UserTask], str], object],
		*,
		task_id: Optional[str] = None,
		suffix: Optional[str] = None,
		tier: Optional[WorkerTier] = None,
		delay: float = 0.0,
	) -> "FakeSessionFactory":
		self.rules.append(_Rule(output=output, task_id=task_id, suffix=suffix, tier=tier, delay=delay))
		return self

	async def spawn(self, tier: WorkerTier) -> FakeHandle:
		if self.spawn_delay:
			await asyncio.sleep(self.spawn_delay)
		if self.spawn_error is not None:
			raise self.spawn_error
		handle = FakeHandle(id=f"fake-{len(self.spawned) + 1}", tier=tier)
		self.spawned.append(handle)
		return handle

	async def execute(self, handle: FakeHandle, task: UserTask) -> str:
		loop = asyncio.get_running_loop()
		record = CallRecord(
			handle_id=handle.id,
			tier=handle.tier,
			task_id=task.id,
			content=task.content,
			started_at=loop.time(),
		)
		self.calls.append(record)

		rule = next((r for r in self.rules if r.matches(handle.tier, task)), None)
		output = rule.output if rule else self.default
		delay = rule.delay if rule else 0.0

		await asyncio.sleep(delay)

		if output is HANG:
			event = asyncio.Event()
			self._hanging[handle.id] = event
			await event.wait()
			record.finished_at = loop.time()
			raise SessionError(f"{handle.id} interrupted")

		record.finished_at = loop.time()
		if isinstance(output, Exception):
			raise output
		if callable(output):
			return output(task)
		return output

	async def interrupt(self, handle: FakeHandle) -> bool:
		event = self._hanging.pop(handle.id, None)
		if event is None:
			return False
		self.interrupted.append(handle.id)
		event.set()
		return True

	async def terminate(self, handle: FakeHandle) -> None:
		handle.closed = True
		self.terminated.append(handle.id)

	def call(self, task_id: str) -> CallRecord:
		return next(c for c in self.calls if c.task_id == task_id)

	def calls_with_suffix(self, suffix: str) -> list[CallRecord]:
		return [c for c in self.calls if c.task_id.endswith(suffix)]


def make_config(tmp_path, **overrides) -> Config:
	"""Config rooted in a temp directory."""
	config = Config(
		config_dir=tmp_path / "config",
		data_dir=tmp_path / "data",
		working_dir=tmp_path,
	)
	for key, value in overrides.items():
		setattr(config, key, value)
	return config


def plan_json(*tasks: dict, summary: str = "Three step rollout", questions: Optional[list] = None) -> str:
	"""Planner-style JSON for a list of camelCase task dicts."""
	return json.dumps({
		"decomposition": list(tasks),
		"summary": summary,
		"questions": questions or [],
	})


def planned(task_id: str, description: str, tier: str = "smart-sonnet", depends_on: Optional[list] = None, complexity: int = 3) -> dict:
	return {
		"taskId": task_id,
		"description": description,
		"suggestedModel": tier,
		"dependsOn": depends_on or [],
		"estimatedComplexity": complexity,
	}
