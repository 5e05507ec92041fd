"""
Orchestration context - per-request state tracked by the coordinator.

A context moves forward through

	idle -> triaging -> [planning] -> delegating -> running -> complete | failed

and can be forced to canceled from any status.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from ..analyzer import TaskAnalysis
from ..models import UserTask, WorkerTier
from ..plans.models import Plan


class ContextStatus(str, Enum):
	"""Lifecycle status of an orchestration context."""
	IDLE = "idle"
	TRIAGING = "triaging"
	PLANNING = "planning"
	DELEGATING = "delegating"
	RUNNING = "running"
	COMPLETE = "complete"
	FAILED = "failed"
	CANCELED = "canceled"

	@property
	def is_terminal(self) -> bool:
		return self in TERMINAL_STATUSES

	def can_advance_to(self, target: "ContextStatus") -> bool:
		"""Whether moving from this status to target keeps the lifecycle forward-only."""
		if target == ContextStatus.CANCELED:
			return True
		if self.is_terminal:
			return False
		return _ORDER[target] >= _ORDER[self]


TERMINAL_STATUSES = frozenset({
	ContextStatus.COMPLETE,
	ContextStatus.FAILED,
	ContextStatus.CANCELED,
})

_ORDER = {
	ContextStatus.IDLE: 0,
	ContextStatus.TRIAGING: 1,
	ContextStatus.PLANNING: 2,
	ContextStatus.DELEGATING: 3,
	ContextStatus.RUNNING: 4,
	ContextStatus.COMPLETE: 5,
	ContextStatus.FAILED: 5,
	ContextStatus.CANCELED: 6,
}


class ResultStatus(str, Enum):
	"""Outcome of one planned task."""
	COMPLETED = "completed"
	FAILED = "failed"


@dataclass(frozen=True)
class OrchestrationResult:
	"""Settled outcome of one task. Written once per task id."""
	task_id: str
	agent_id: str
	tier: WorkerTier
	status: ResultStatus
	output: Optional[str] = None
	error: Optional[str] = None

	@property
	def succeeded(self) -> bool:
		return self.status == ResultStatus.COMPLETED

	def to_dict(self) -> dict:
		return {
			"taskId": self.task_id,
			"agentId": self.agent_id,
			"model": self.tier.value,
			"status": self.status.value,
			"output": self.output,
			"error": self.error,
		}


@dataclass
class OrchestrationContext:
	"""State of one request from triage to aggregation."""
	id: str
	initial_task: UserTask
	status: ContextStatus = ContextStatus.IDLE
	analysis: Optional[TaskAnalysis] = None
	plan: Optional[Plan] = None
	task_ids: list[str] = field(default_factory=list)
	sub_agent_ids: list[str] = field(default_factory=list)
	results: dict[str, OrchestrationResult] = field(default_factory=dict)
	created_at: str = field(default_factory=lambda: datetime.now().isoformat())
	completed_at: Optional[str] = None

	@property
	def is_terminal(self) -> bool:
		return self.status.is_terminal

	def ordered_results(self) -> list[OrchestrationResult]:
		"""Results in task order, skipping tasks that have not settled."""
		return [self.results[tid] for tid in self.task_ids if tid in self.results]

	def has_failures(self) -> bool:
		return any(not r.succeeded for r in self.results.values())
