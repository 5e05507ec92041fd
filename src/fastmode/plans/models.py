"""
Plan Models - Pydantic schemas for planner output.

Defines the decomposition a planning worker returns for a complex request:
sub-tasks with their suggested tier, dependencies and estimated complexity.
The planner speaks camelCase JSON; snake_case field names are accepted too.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models import WorkerTier


class PlannedTask(BaseModel):
	"""A single sub-task within a plan."""
	model_config = ConfigDict(populate_by_name=True)

	task_id: str = Field(alias="taskId", min_length=1, description="Unique id within the plan")
	description: str = Field(description="What the worker should do")
	suggested_tier: WorkerTier = Field(
		default=WorkerTier.STANDARD,
		alias="suggestedModel",
		description="Tier of worker to run this task on",
	)
	depends_on: list[str] = Field(
		default_factory=list,
		alias="dependsOn",
		description="Task ids that must settle before this one starts",
	)
	estimated_complexity: int = Field(default=5, alias="estimatedComplexity")

	@field_validator("task_id", mode="before")
	@classmethod
	def _stringify_id(cls, value):
		if isinstance(value, (int, float)) and not isinstance(value, bool):
			return str(value)
		return value

	@field_validator("suggested_tier", mode="before")
	@classmethod
	def _coerce_tier(cls, value):
		return WorkerTier.coerce(value)

	@field_validator("depends_on", mode="before")
	@classmethod
	def _coerce_deps(cls, value):
		if value is None:
			return []
		if isinstance(value, (str, int)):
			return [str(value)]
		return [str(v) for v in value]

	@field_validator("estimated_complexity", mode="before")
	@classmethod
	def _clamp_complexity(cls, value):
		try:
			return max(1, min(10, int(value)))
		except (TypeError, ValueError):
			return 5


class Plan(BaseModel):
	"""
	A decomposition of a complex request.

	Refinements are appended by clarification round-trips with the
	planning worker after the plan was first produced.
	"""
	model_config = ConfigDict(populate_by_name=True)

	decomposition: list[PlannedTask] = Field(description="Sub-tasks in planner order")
	summary: str = Field(default="")
	questions: list[str] = Field(default_factory=list)
	refinements: list[str] = Field(default_factory=list)

	@field_validator("questions", "refinements", mode="before")
	@classmethod
	def _none_to_list(cls, value):
		return [] if value is None else value

	@field_validator("summary", mode="before")
	@classmethod
	def _none_to_str(cls, value):
		return "" if value is None else value

	@property
	def task_ids(self) -> list[str]:
		return [t.task_id for t in self.decomposition]

	def get_task(self, task_id: str) -> PlannedTask | None:
		for task in self.decomposition:
			if task.task_id == task_id:
				return task
		return None

	def to_wire(self) -> dict:
		"""Serialize back to the planner's camelCase JSON shape."""
		return self.model_dump(mode="json", by_alias=True)
