"""Tests for the Rich views."""

from rich.console import Console

from fastmode.analyzer import analyze_task
from fastmode.models import UserTask, WorkerTier
from fastmode.orchestrator.context import ContextStatus, OrchestrationContext, OrchestrationResult, ResultStatus
from fastmode.orchestrator.pool import Worker, WorkerStatus
from fastmode.plans import parse_plan
from fastmode.visualizer import render_analysis, render_context_summary, render_plan, render_workers
from fastmode.visualizer.utils import elapsed, format_duration, truncate

from .helpers import plan_json, planned


def make_console() -> Console:
	return Console(record=True, width=120)


def test_render_analysis():
	console = make_console()
	render_analysis(analyze_task("Fix the login bug"), console=console)

	text = console.export_text()
	assert "Task Analysis" in text
	assert "bug_fix" in text


def test_render_plan():
	console = make_console()
	plan = parse_plan(
		plan_json(planned("t1", "Draft"), planned("t2", "Ship", depends_on=["t1"]), summary="Ship it", questions=["When?"]),
		"x",
	)
	plan.refinements.append("Ship on Monday")
	render_plan(plan, console=console)

	text = console.export_text()
	assert "Ship it" in text
	assert "after: t1" in text
	assert "When?" in text
	assert "Refinements: 1" in text


def test_render_workers():
	console = make_console()
	workers = [
		Worker(id="haiku-1", tier=WorkerTier.FAST, status=WorkerStatus.DONE),
		Worker(id="sonnet-2", tier=WorkerTier.STANDARD, status=WorkerStatus.ERROR, error="boom"),
	]
	render_workers(workers, console=console)

	text = console.export_text()
	assert "haiku-1" in text
	assert "boom" in text


def test_render_workers_empty():
	console = make_console()
	render_workers([], console=console)
	assert "No workers spawned" in console.export_text()


def test_render_context_summary():
	console = make_console()
	context = OrchestrationContext(
		id="orch-1-1",
		initial_task=UserTask(id="u1", content="x"),
		status=ContextStatus.FAILED,
		task_ids=["a", "b", "c"],
	)
	context.results["a"] = OrchestrationResult("a", "haiku-1", WorkerTier.FAST, ResultStatus.COMPLETED, output="alpha")
	context.results["b"] = OrchestrationResult("b", "sonnet-2", WorkerTier.STANDARD, ResultStatus.FAILED, error="disk full")
	render_context_summary(context, console=console)

	text = console.export_text()
	assert "orch-1-1" in text
	assert "failed" in text
	assert "disk full" in text
	assert "pending" in text


def test_utils():
	assert format_duration(0.0001) == "<1ms"
	assert format_duration(0.25) == "250ms"
	assert format_duration(75) == "1m 15s"
	assert elapsed("2026-01-01T00:00:00", "2026-01-01T00:00:02") == "2.0s"
	assert elapsed("not a date") == "-"
	assert truncate("a\nb", 10) == "a b"
	assert truncate("x" * 20, 10) == "xxxxxxx..."
	assert truncate(None) == ""
