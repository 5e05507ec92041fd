"""Tests for prompt builders and the fallback formatter."""

import json

from fastmode.analyzer import analyze_task
from fastmode.models import UserTask, WorkerTier
from fastmode.orchestrator.aggregation import (
	build_planning_prompt,
	build_summarizer_prompt,
	fallback_aggregate,
	needs_summarizer,
)
from fastmode.orchestrator.context import OrchestrationContext, OrchestrationResult, ResultStatus
from fastmode.plans import parse_plan

from .helpers import plan_json, planned


def make_context(content: str = "Ship it", plan=None, results=()) -> OrchestrationContext:
	context = OrchestrationContext(
		id="orch-1-1",
		initial_task=UserTask(id="u1", content=content),
		analysis=analyze_task(content),
		plan=plan,
	)
	for r in results:
		context.task_ids.append(r.task_id)
		context.results[r.task_id] = r
	return context


def ok(task_id: str, output: str, tier: WorkerTier = WorkerTier.STANDARD) -> OrchestrationResult:
	return OrchestrationResult(task_id=task_id, agent_id=f"w-{task_id}", tier=tier, status=ResultStatus.COMPLETED, output=output)


def failed(task_id: str, error: str) -> OrchestrationResult:
	return OrchestrationResult(task_id=task_id, agent_id=f"w-{task_id}", tier=WorkerTier.STANDARD, status=ResultStatus.FAILED, error=error)


class TestFallbackAggregate:
	"""Deterministic formatting."""

	def test_direct_single_result_is_raw(self):
		context = make_context(results=[ok("u1", "Just the answer")])
		assert fallback_aggregate(context) == "Just the answer"

	def test_direct_single_failure_is_formatted(self):
		context = make_context(results=[failed("u1", "timeout")])
		assert fallback_aggregate(context) == "Summary: Completed\n\n=== u1 (smart-sonnet, failed) ===\nError: timeout"

	def test_planned_results_in_task_order(self):
		plan = parse_plan(plan_json(planned("a", "A"), planned("b", "B"), summary="Two parts"), "x")
		context = make_context(plan=plan)
		context.task_ids = ["a", "b"]
		context.results["b"] = failed("b", "nope")
		context.results["a"] = ok("a", "alpha", WorkerTier.FAST)

		assert fallback_aggregate(context) == (
			"Summary: Two parts\n\n"
			"=== a (fast, completed) ===\nalpha\n\n"
			"=== b (smart-sonnet, failed) ===\nError: nope"
		)

	def test_unsettled_tasks_skipped(self):
		context = make_context(results=[ok("a", "alpha"), ok("b", "beta")])
		context.task_ids.append("c")
		assert "=== c" not in fallback_aggregate(context)

	def test_missing_error_message(self):
		context = make_context(results=[failed("a", None), ok("b", "")])
		text = fallback_aggregate(context)
		assert "Error: unknown error" in text
		assert text.endswith("=== b (smart-sonnet, completed) ===")


class TestSummarizer:
	"""When and how the summarizer runs."""

	def test_needs_summarizer(self):
		assert not needs_summarizer(make_context("Hello", results=[ok("u1", "hi")]))
		assert needs_summarizer(make_context("Hello", results=[ok("a", "1"), ok("b", "2")]))
		complex_ctx = make_context("Design the platform", results=[ok("u1", "done")])
		assert needs_summarizer(complex_ctx)
		assert not needs_summarizer(complex_ctx, complexity_threshold=11)

	def test_prompt_contains_results_json(self):
		plan = parse_plan(plan_json(planned("a", "A"), planned("b", "B"), summary="Two parts"), "x")
		context = make_context("Migrate billing", plan=plan, results=[ok("a", "alpha"), failed("b", "disk full")])

		prompt = build_summarizer_prompt(context)

		assert prompt.startswith("You are the synthesizer for an orchestrated team of sub-agents.")
		assert "USER TASK: Migrate billing" in prompt
		assert "PLAN SUMMARY: Two parts" in prompt
		assert "call it out and propose a workaround or next step" in prompt
		body = prompt.split("SUB-AGENT RESULTS (JSON):\n", 1)[1].split("\n\nRequirements:", 1)[0]
		assert json.loads(body) == [
			{"taskId": "a", "model": "smart-sonnet", "status": "completed", "output": "alpha", "error": None},
			{"taskId": "b", "model": "smart-sonnet", "status": "failed", "output": None, "error": "disk full"},
		]

	def test_prompt_without_plan_summary(self):
		prompt = build_summarizer_prompt(make_context(results=[ok("u1", "x")]))
		assert "PLAN SUMMARY" not in prompt


def test_planning_prompt():
	task = UserTask(id="u1", content="Design the billing API")
	prompt = build_planning_prompt(task, analyze_task(task.content))

	assert "TASK: Design the billing API" in prompt
	assert "Complexity: 8/10" in prompt
	assert "Required tools: WebFetch" in prompt
	assert '"taskId": "t1"' in prompt
