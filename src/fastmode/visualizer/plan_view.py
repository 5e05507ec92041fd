"""Rich views for analyses and plans."""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.tree import Tree

from ..analyzer import TaskAnalysis
from ..model_router import display_name
from ..plans.models import Plan


def render_analysis(analysis: TaskAnalysis, console: Optional[Console] = None) -> None:
	"""Render a routing decision as a panel."""
	console = console or Console()

	tools = ", ".join(analysis.required_tools) or "none"
	lines = [
		f"[bold]Intent:[/bold] {analysis.intent}",
		f"[bold]Complexity:[/bold] {analysis.complexity}/10",
		f"[bold]Tier:[/bold] {analysis.suggested_tier.value} ({display_name(analysis.suggested_tier)})",
		f"[bold]Needs planning:[/bold] {'yes' if analysis.needs_planning else 'no'}",
		f"[bold]Estimated time:[/bold] {analysis.estimated_time}",
		f"[bold]Parallelizable:[/bold] {'yes' if analysis.can_parallelize else 'no'}",
		f"[bold]Tools:[/bold] {tools}",
		f"[bold]Confidence:[/bold] {analysis.confidence:.2f}",
	]

	console.print(Panel("\n".join(lines), title="Task Analysis", border_style="cyan"))


def render_plan(plan: Plan, console: Optional[Console] = None) -> None:
	"""Render a plan as a Rich Tree, one branch per task with its dependencies."""
	console = console or Console()

	tree = Tree(
		f"[bold]{plan.summary or 'Plan'}[/bold]  "
		f"[dim]({len(plan.decomposition)} tasks)[/dim]"
	)

	for task in plan.decomposition:
		branch = tree.add(
			f"[cyan]{task.task_id}[/cyan] [dim]({task.suggested_tier.value}, "
			f"complexity {task.estimated_complexity})[/dim] {task.description}"
		)
		if task.depends_on:
			branch.add(f"[dim]after: {', '.join(task.depends_on)}[/dim]")

	console.print(tree)

	if plan.questions:
		console.print()
		console.print("[bold]Open questions:[/bold]")
		for q in plan.questions:
			console.print(f"  - {q}")

	if plan.refinements:
		console.print()
		console.print(f"[bold]Refinements:[/bold] {len(plan.refinements)}")
