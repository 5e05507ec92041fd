"""
Aggregation - prompts sent to helper workers and the deterministic formatter.

Covers the planning prompt, the summarizer prompt that turns many task
results into one answer, and the plain-text fallback used when no
summarizer runs or it fails.
"""

import json

from ..analyzer import TaskAnalysis
from ..models import UserTask
from .context import OrchestrationContext, ResultStatus


def build_planning_prompt(task: UserTask, analysis: TaskAnalysis) -> str:
	"""Prompt asking a planning worker for a JSON decomposition."""
	tools = ", ".join(analysis.required_tools) or "none specified"
	return f"""You are a planning assistant. Analyze this task and create a detailed execution plan.

TASK: {task.content}

ANALYSIS:
- Complexity: {analysis.complexity}/10
- Intent: {analysis.intent}
- Required tools: {tools}

Please provide:
1. A decomposition into sub-tasks
2. For each sub-task:
   - A clear description
   - Suggested model (fast for simple lookups and tooling, smart-sonnet for main work)
   - Dependencies on other sub-tasks
   - Estimated complexity (1-10)
3. Any questions that need clarification before execution
4. A brief summary of the approach

Format your response as JSON:
{{
  "decomposition": [
    {{ "taskId": "t1", "description": "...", "suggestedModel": "fast|smart-sonnet", "dependsOn": [], "estimatedComplexity": 3 }}
  ],
  "summary": "...",
  "questions": ["...", "..."]
}}"""


def build_refinement_prompt(question: str) -> str:
	return f"Regarding the previous plan:\n\n{question}"


def results_payload(context: OrchestrationContext) -> list[dict]:
	"""Settled results in task order, as the summarizer sees them."""
	return [
		{
			"taskId": r.task_id,
			"model": r.tier.value,
			"status": r.status.value,
			"output": r.output,
			"error": r.error,
		}
		for r in context.ordered_results()
	]


def build_summarizer_prompt(context: OrchestrationContext) -> str:
	"""Prompt asking a worker to merge every task result into one reply."""
	lines = [
		"You are the synthesizer for an orchestrated team of sub-agents.",
		"Produce ONE final response to the user.",
		"",
		f"USER TASK: {context.initial_task.content}",
		"",
	]
	if context.plan is not None and context.plan.summary:
		lines.extend([f"PLAN SUMMARY: {context.plan.summary}", ""])

	lines.extend([
		"SUB-AGENT RESULTS (JSON):",
		json.dumps(results_payload(context), indent=2),
		"",
		"Requirements:",
		"- Be concise but complete.",
		"- If any sub-task failed, call it out and propose a workaround or next step.",
		"- Prefer actionable steps, commands, and file paths when relevant.",
		"- Do not mention internal orchestration mechanics.",
	])
	return "\n".join(lines)


def needs_summarizer(context: OrchestrationContext, complexity_threshold: int = 6) -> bool:
	"""Multi-task contexts and complex single tasks get a summarizer pass."""
	if len(context.task_ids) > 1:
		return True
	return context.analysis is not None and context.analysis.complexity >= complexity_threshold


def fallback_aggregate(context: OrchestrationContext) -> str:
	"""
	Format results without a model call.

	A direct (unplanned) run with a single successful result is returned as
	the raw worker output. Anything else gets a summary header and one
	section per settled task, in task order.
	"""
	results = context.ordered_results()

	if context.plan is None and len(results) == 1 and results[0].status == ResultStatus.COMPLETED:
		return results[0].output or ""

	summary = context.plan.summary if context.plan is not None and context.plan.summary else "Completed"
	lines = [f"Summary: {summary}"]

	for r in results:
		lines.append("")
		lines.append(f"=== {r.task_id} ({r.tier.value}, {r.status.value}) ===")
		if r.status == ResultStatus.FAILED:
			lines.append(f"Error: {r.error or 'unknown error'}")
		elif r.output:
			lines.append(r.output)

	return "\n".join(lines)
