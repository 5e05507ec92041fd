"""Plans module - planner output schema and tolerant parsing."""

from .models import Plan, PlannedTask
from .parser import default_plan, extract_first_json_object, parse_plan, try_parse_plan

__all__ = [
	"Plan",
	"PlannedTask",
	"default_plan",
	"extract_first_json_object",
	"parse_plan",
	"try_parse_plan",
]
