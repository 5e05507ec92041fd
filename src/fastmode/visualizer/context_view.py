"""Rich views for workers and orchestration contexts."""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..orchestrator.context import OrchestrationContext, ResultStatus
from ..orchestrator.pool import Worker
from .utils import CONTEXT_STATUS_STYLES, WORKER_STATUS_STYLES, elapsed, styled, truncate


def render_workers(workers: list[Worker], console: Optional[Console] = None) -> None:
	"""Render a table of workers and their current state."""
	console = console or Console()

	if not workers:
		console.print("[dim]No workers spawned.[/dim]")
		return

	table = Table(title="Workers")
	table.add_column("Worker", style="cyan")
	table.add_column("Tier")
	table.add_column("Status", justify="center")
	table.add_column("Task")
	table.add_column("Duration", justify="right")
	table.add_column("Error")

	for w in workers:
		table.add_row(
			w.id,
			w.tier.value,
			styled(w.status.value, WORKER_STATUS_STYLES.get(w.status, "white")),
			w.current_task_id or "",
			elapsed(w.spawned_at, w.completed_at),
			truncate(w.error, 40),
		)

	console.print(table)


def render_context_summary(context: OrchestrationContext, console: Optional[Console] = None) -> None:
	"""Render a context's status header and a row per task result."""
	console = console or Console()

	style = CONTEXT_STATUS_STYLES.get(context.status, "white")
	header = (
		f"[bold]Status:[/bold] {styled(context.status.value, style)}  |  "
		f"[bold]Tasks:[/bold] {len(context.results)}/{len(context.task_ids)}  |  "
		f"[bold]Workers:[/bold] {len(context.sub_agent_ids)}  |  "
		f"[bold]Elapsed:[/bold] {elapsed(context.created_at, context.completed_at)}"
	)
	console.print(Panel(header, title=f"Context: {context.id}", border_style=style))

	if not context.task_ids:
		return

	table = Table()
	table.add_column("Task", style="cyan")
	table.add_column("Worker")
	table.add_column("Tier")
	table.add_column("Status", justify="center")
	table.add_column("Output")

	for task_id in context.task_ids:
		r = context.results.get(task_id)
		if r is None:
			table.add_row(task_id, "", "", "[dim]pending[/dim]", "")
			continue
		ok = r.status == ResultStatus.COMPLETED
		table.add_row(
			task_id,
			r.agent_id,
			r.tier.value,
			styled(r.status.value, "green" if ok else "red"),
			truncate(r.output if ok else r.error),
		)

	console.print(table)
