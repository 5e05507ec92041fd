"""Shared error types for the fastmode package."""


class OrchestratorError(Exception):
	"""Base exception for orchestration errors.

	Use this for caller-facing errors that should carry an actionable message.
	"""
	pass


class ContextNotFoundError(OrchestratorError):
	"""Raised when a context id is not in the coordinator's registry."""

	def __init__(self, context_id: str):
		super().__init__(f"Context {context_id} not found")
		self.context_id = context_id


class MissingAnalysisError(OrchestratorError):
	"""Raised when delegation is attempted before triage produced an analysis."""

	def __init__(self, context_id: str):
		super().__init__(f"Context {context_id} has no analysis")
		self.context_id = context_id


class OrchestrationTimeoutError(OrchestratorError):
	"""Raised when a context does not reach a terminal status in time."""

	def __init__(self, context_id: str, timeout: float):
		super().__init__(f"Orchestration timed out after {timeout:g}s")
		self.context_id = context_id
		self.timeout = timeout


class WorkerNotFoundError(OrchestratorError):
	"""Raised when a worker id is not tracked by the pool."""

	def __init__(self, worker_id: str):
		super().__init__(f"Agent {worker_id} not found")
		self.worker_id = worker_id


class SessionError(OrchestratorError):
	"""Raised by session factories when a model call fails."""
	pass
