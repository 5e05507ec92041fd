"""fastmode - multi-agent task orchestration for Claude workers."""

__version__ = "0.1.0"

from .analyzer import TaskAnalysis, TaskAnalyzer, analyze_task, is_quick_task, needs_opus_planning
from .config import Config, get_config, load_config
from .errors import (
	ContextNotFoundError,
	MissingAnalysisError,
	OrchestrationTimeoutError,
	OrchestratorError,
	SessionError,
	WorkerNotFoundError,
)
from .models import Message, TaskContext, TaskPriority, UserTask, WorkerTier
from .orchestrator import FastModeCoordinator
from .plans import Plan, PlannedTask
from .sessions import AgentSessionFactory, ClaudeCliSessionFactory

__all__ = [
	"AgentSessionFactory",
	"ClaudeCliSessionFactory",
	"Config",
	"ContextNotFoundError",
	"FastModeCoordinator",
	"Message",
	"MissingAnalysisError",
	"OrchestrationTimeoutError",
	"OrchestratorError",
	"Plan",
	"PlannedTask",
	"SessionError",
	"TaskAnalysis",
	"TaskAnalyzer",
	"TaskContext",
	"TaskPriority",
	"UserTask",
	"WorkerNotFoundError",
	"WorkerTier",
	"analyze_task",
	"get_config",
	"is_quick_task",
	"load_config",
	"needs_opus_planning",
]
