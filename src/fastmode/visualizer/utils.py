"""Shared utilities for visualizer views."""

from datetime import datetime
from typing import Optional

from ..orchestrator.context import ContextStatus
from ..orchestrator.pool import WorkerStatus

CONTEXT_STATUS_STYLES = {
	ContextStatus.IDLE: "dim",
	ContextStatus.TRIAGING: "cyan",
	ContextStatus.PLANNING: "magenta",
	ContextStatus.DELEGATING: "cyan",
	ContextStatus.RUNNING: "yellow",
	ContextStatus.COMPLETE: "green",
	ContextStatus.FAILED: "red",
	ContextStatus.CANCELED: "dim",
}

WORKER_STATUS_STYLES = {
	WorkerStatus.IDLE: "dim",
	WorkerStatus.RUNNING: "yellow",
	WorkerStatus.DONE: "green",
	WorkerStatus.ERROR: "red",
}


def format_duration(seconds: float) -> str:
	"""Format a duration for display. e.g. '1.2s', '45ms', '2m 3s'."""
	if seconds < 0.001:
		return "<1ms"
	if seconds < 1.0:
		return f"{seconds * 1000:.0f}ms"
	if seconds < 60.0:
		return f"{seconds:.1f}s"
	minutes = int(seconds // 60)
	secs = seconds % 60
	return f"{minutes}m {secs:.0f}s"


def elapsed(start_iso: str, end_iso: Optional[str] = None) -> str:
	"""Duration between two ISO timestamps, or until now if end is missing."""
	try:
		start = datetime.fromisoformat(start_iso)
		end = datetime.fromisoformat(end_iso) if end_iso else datetime.now()
	except (ValueError, TypeError):
		return "-"
	return format_duration(max((end - start).total_seconds(), 0.0))


def truncate(text: Optional[str], max_len: int = 60) -> str:
	"""Shorten text for table display, flattening newlines."""
	if not text:
		return ""
	flat = " ".join(text.split())
	if len(flat) <= max_len:
		return flat
	return flat[:max_len - 3] + "..."


def styled(value: str, style: str) -> str:
	return f"[{style}]{value}[/{style}]"
