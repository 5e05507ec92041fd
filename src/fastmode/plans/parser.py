"""
Plan parser - turns free-form planner output into a Plan.

Planner responses are untrusted text. Three strategies are tried in order:

1. The trimmed response is itself a JSON object.
2. The response contains a fenced ```json block.
3. The first balanced top-level object, found by brace matching that
   respects string literals and escapes.

If none yields a valid Plan, a single-task default plan is returned, so
parsing never raises.
"""

import json
import logging
import re
from typing import Any, Optional

from pydantic import ValidationError

from ..models import WorkerTier
from .models import Plan, PlannedTask

logger = logging.getLogger(__name__)

DEFAULT_TASK_ID = "main"
DEFAULT_SUMMARY = "Single-task execution"

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```", re.I)


def default_plan(description: str, tier: WorkerTier = WorkerTier.STANDARD) -> Plan:
	"""The plan used when planner output cannot be parsed."""
	return Plan(
		decomposition=[
			PlannedTask(
				task_id=DEFAULT_TASK_ID,
				description=description,
				suggested_tier=tier,
				depends_on=[],
				estimated_complexity=5,
			)
		],
		summary=DEFAULT_SUMMARY,
	)


def extract_first_json_object(text: str) -> Optional[str]:
	"""Return the first balanced {...} substring, or None if unbalanced."""
	start = text.find("{")
	if start == -1:
		return None

	depth = 0
	in_string = False
	escape = False

	for i in range(start, len(text)):
		ch = text[i]

		if in_string:
			if escape:
				escape = False
			elif ch == "\\":
				escape = True
			elif ch == '"':
				in_string = False
			continue

		if ch == '"':
			in_string = True
		elif ch == "{":
			depth += 1
		elif ch == "}":
			depth -= 1
			if depth == 0:
				return text[start:i + 1]

	return None


def _load_plan(candidate: str) -> Optional[Plan]:
	try:
		data: Any = json.loads(candidate)
	except (json.JSONDecodeError, ValueError):
		return None
	if not isinstance(data, dict):
		return None
	try:
		return Plan.model_validate(data)
	except ValidationError as e:
		logger.debug(f"Planner JSON did not match plan schema: {e}")
		return None


def try_parse_plan(response: Any) -> Optional[Plan]:
	"""Run the three parsing strategies; None if all of them fail."""
	if not isinstance(response, str):
		return None

	trimmed = response.strip()

	if trimmed.startswith("{"):
		plan = _load_plan(trimmed)
		if plan is not None:
			return plan

	fenced = _FENCED_JSON.search(trimmed)
	if fenced and fenced.group(1):
		plan = _load_plan(fenced.group(1))
		if plan is not None:
			return plan

	first = extract_first_json_object(trimmed)
	if first:
		plan = _load_plan(first)
		if plan is not None:
			return plan

	return None


def parse_plan(
	response: Any,
	description: str,
	fallback_tier: WorkerTier = WorkerTier.STANDARD,
) -> Plan:
	"""
	Parse planner output into a Plan, falling back to the default plan.

	Args:
		response: Raw planner output (anything non-string falls back)
		description: Original request text, used by the default plan
		fallback_tier: Analyzer's suggested tier, used by the default plan

	Returns:
		A Plan; never raises
	"""
	plan = try_parse_plan(response)
	if plan is not None:
		logger.info(f"Parsed plan with {len(plan.decomposition)} tasks")
		return plan

	preview = response[:80] if isinstance(response, str) else type(response).__name__
	logger.warning(f"Could not parse plan from planner output, using default plan: {preview!r}")
	return default_plan(description, fallback_tier)
