"""Visualizer package - Rich terminal views for orchestration state."""

from .context_view import render_context_summary, render_workers
from .plan_view import render_analysis, render_plan

__all__ = [
	"render_analysis",
	"render_context_summary",
	"render_plan",
	"render_workers",
]
