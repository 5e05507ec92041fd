"""Core request types shared by the analyzer, worker pool and coordinator."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class WorkerTier(str, Enum):
	"""Capability class of a worker."""
	FAST = "fast"                  # Cheap lookups, greetings, quick edits
	STANDARD = "smart-sonnet"      # General-purpose default
	PLANNING = "smart-opus"        # Planning-grade, architecture, critical work

	@classmethod
	def coerce(cls, value: object) -> "WorkerTier":
		"""Map any tier-ish value to a tier, defaulting to STANDARD."""
		if isinstance(value, cls):
			return value
		if isinstance(value, str):
			lowered = value.strip().lower()
			for tier in cls:
				if lowered == tier.value:
					return tier
			if lowered in ("haiku", "fast"):
				return cls.FAST
			if lowered in ("opus", "smart-opus"):
				return cls.PLANNING
		return cls.STANDARD


class TaskPriority(str, Enum):
	"""Priority of a user request."""
	URGENT = "URGENT"
	NORMAL = "NORMAL"
	TODO = "TODO"


@dataclass(frozen=True)
class Message:
	"""A prior conversational turn."""
	role: str
	content: str


@dataclass(frozen=True)
class TaskContext:
	"""Optional context attached to a request."""
	files: tuple[str, ...] = ()
	previous_messages: tuple[Message, ...] = ()
	constraints: tuple[str, ...] = ()


@dataclass(frozen=True)
class UserTask:
	"""A request to fulfil. Immutable once created."""
	content: str
	id: str = ""
	context: Optional[TaskContext] = None
	priority: TaskPriority = TaskPriority.NORMAL
