"""CLI for fastmode: analyze, parse-plan, and run commands."""

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from rich.console import Console

from .analyzer import TaskAnalyzer, is_quick_task, needs_opus_planning
from .config import Config, load_config
from .errors import OrchestratorError
from .logging_config import setup_logging
from .model_router import parse_model_override
from .models import TaskContext, UserTask, WorkerTier
from .orchestrator import FastModeCoordinator, WorkerPool
from .plans import parse_plan
from .sessions import ClaudeCliSessionFactory

DIRECT_TASK_ID = "direct"


def _task_context(args: argparse.Namespace) -> Optional[TaskContext]:
	files = tuple(getattr(args, "files", None) or ())
	constraints = tuple(getattr(args, "constraint", None) or ())
	if not files and not constraints:
		return None
	return TaskContext(files=files, constraints=constraints)


def _read_input(path: str) -> str:
	if path == "-":
		return sys.stdin.read()
	return Path(path).expanduser().read_text()


def cmd_analyze(args: argparse.Namespace, config: Config) -> None:
	"""Show how a request would be routed, without calling any model."""
	from .visualizer import render_analysis

	analyzer = TaskAnalyzer(planning_threshold=config.planning_threshold)
	analysis = analyzer.analyze(args.text, _task_context(args))

	if args.json:
		data = {
			"intent": analysis.intent,
			"complexity": analysis.complexity,
			"estimated_time": analysis.estimated_time,
			"required_tools": analysis.required_tools,
			"suggested_tier": analysis.suggested_tier.value,
			"can_parallelize": analysis.can_parallelize,
			"needs_planning": analysis.needs_planning,
			"confidence": analysis.confidence,
			"quick": is_quick_task(args.text),
		}
		print(json.dumps(data, indent=2))
	else:
		render_analysis(analysis)


def cmd_parse_plan(args: argparse.Namespace, config: Config) -> None:
	"""Parse saved planner output into a plan, falling back like the coordinator does."""
	from .visualizer import render_plan

	try:
		text = _read_input(args.file)
	except OSError as e:
		print(f"Cannot read {args.file}: {e}", file=sys.stderr)
		sys.exit(1)

	plan = parse_plan(text, args.description)

	if args.json:
		print(json.dumps(plan.to_wire(), indent=2))
	else:
		render_plan(plan)


async def _run_direct(pool: WorkerPool, task: UserTask, tier: WorkerTier) -> str:
	"""Run a request on a single worker, skipping triage entirely."""
	worker = await pool.spawn(tier)
	return await pool.execute(worker.id, replace(task, id=task.id or DIRECT_TASK_ID))


async def _run(args: argparse.Namespace, config: Config) -> str:
	factory = ClaudeCliSessionFactory(config, working_dir=args.working_dir)
	coordinator = FastModeCoordinator(factory, config=config)

	override = parse_model_override(args.text)
	task = UserTask(content=override.task, context=_task_context(args))

	try:
		if override.tier is not None:
			response = await _run_direct(coordinator.pool, task, override.tier)
		elif not args.no_shortcut and is_quick_task(task.content) and not needs_opus_planning(task.content):
			tier = coordinator.analyzer.analyze(task.content, task.context).suggested_tier
			response = await _run_direct(coordinator.pool, task, tier)
		else:
			_, response = await coordinator.run(task, timeout=args.timeout)

		if args.show_workers:
			from .visualizer import render_workers
			render_workers(coordinator.get_sub_agents(), console=Console(stderr=True))

		return response
	finally:
		await coordinator.dispose()


def cmd_run(args: argparse.Namespace, config: Config) -> None:
	"""Orchestrate a request through the Claude CLI and print the answer."""
	try:
		response = asyncio.run(_run(args, config))
	except OrchestratorError as e:
		print(f"Error: {e}", file=sys.stderr)
		sys.exit(1)

	print(response)


def _add_context_args(parser: argparse.ArgumentParser) -> None:
	parser.add_argument("--files", nargs="*", default=None, help="Files relevant to the request")
	parser.add_argument(
		"--constraint",
		action="append",
		default=None,
		help="Constraint on the work (repeatable)",
	)


def main(argv: Optional[list[str]] = None) -> None:
	"""CLI entry point."""
	parser = argparse.ArgumentParser(
		prog="fastmode",
		description="Multi-agent task orchestration over the Claude CLI",
	)
	parser.add_argument("--log-level", type=str, default=None, help="DEBUG, INFO, WARNING or ERROR")
	subparsers = parser.add_subparsers(dest="command")

	# analyze
	analyze_parser = subparsers.add_parser("analyze", help="Show the routing decision for a request")
	analyze_parser.add_argument("text", help="Request text")
	analyze_parser.add_argument("--json", action="store_true", help="Print JSON instead of a panel")
	_add_context_args(analyze_parser)
	analyze_parser.set_defaults(func=cmd_analyze)

	# parse-plan
	plan_parser = subparsers.add_parser("parse-plan", help="Parse planner output from a file ('-' for stdin)")
	plan_parser.add_argument("file", help="File holding raw planner output")
	plan_parser.add_argument(
		"--description",
		type=str,
		default="Execute the main task",
		help="Request text used if the output has no usable plan",
	)
	plan_parser.add_argument("--json", action="store_true", help="Print plan JSON instead of a tree")
	plan_parser.set_defaults(func=cmd_parse_plan)

	# run
	run_parser = subparsers.add_parser("run", help="Orchestrate a request end to end")
	run_parser.add_argument("text", help="Request text; prefix with @opus, @sonnet or @haiku to pin a tier")
	run_parser.add_argument("--timeout", type=float, default=None, help="Seconds to wait for workers")
	run_parser.add_argument("--working-dir", type=Path, default=None, help="Directory workers run in")
	run_parser.add_argument(
		"--no-shortcut",
		action="store_true",
		help="Always triage, even for quick requests",
	)
	run_parser.add_argument("--show-workers", action="store_true", help="Print the worker table to stderr")
	_add_context_args(run_parser)
	run_parser.set_defaults(func=cmd_run)

	args = parser.parse_args(argv)

	if not args.command:
		parser.print_help()
		sys.exit(1)

	load_dotenv()
	config = load_config()
	setup_logging(args.log_level, log_dir=config.log_dir)

	args.func(args, config)


if __name__ == "__main__":
	main()
