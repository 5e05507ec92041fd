"""Orchestrator module - worker pool, event hub and the coordinator."""

from .aggregation import build_summarizer_prompt, fallback_aggregate, needs_summarizer
from .context import ContextStatus, OrchestrationContext, OrchestrationResult, ResultStatus
from .coordinator import CANCELED_RESPONSE, FastModeCoordinator
from .events import EventEmitter, EventHub, SubAgentEvent, SubAgentEventType
from .pool import Worker, WorkerPool, WorkerStatus

__all__ = [
	"CANCELED_RESPONSE",
	"ContextStatus",
	"EventEmitter",
	"EventHub",
	"FastModeCoordinator",
	"OrchestrationContext",
	"OrchestrationResult",
	"ResultStatus",
	"SubAgentEvent",
	"SubAgentEventType",
	"Worker",
	"WorkerPool",
	"WorkerStatus",
	"build_summarizer_prompt",
	"fallback_aggregate",
	"needs_summarizer",
]
