"""
Fast Mode Coordinator - triages requests and drives workers to an answer.

The coordinator never does model work itself. For each request it:

1. Triages: analyzes the text and, for complex requests, asks a planning
   worker for a decomposition.
2. Delegates: runs one worker per planned task, each waiting on the
   futures of the tasks it depends on.
3. Aggregates: merges results with a summarizer worker, or formats them
   directly when that is not worth a model call.

Contexts live in an id-keyed registry owned by the coordinator. Workers
never hold a reference back to their context.
"""

import asyncio
import itertools
import logging
import secrets
import time
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional, Union

from ..analyzer import TaskAnalysis, TaskAnalyzer
from ..config import Config, get_config
from ..errors import ContextNotFoundError, MissingAnalysisError, OrchestrationTimeoutError
from ..models import UserTask, WorkerTier
from ..plans.models import Plan, PlannedTask
from ..plans.parser import parse_plan
from ..sessions import AgentSessionFactory
from .aggregation import (
	build_planning_prompt,
	build_refinement_prompt,
	build_summarizer_prompt,
	fallback_aggregate,
	needs_summarizer,
)
from .context import (
	ContextStatus,
	OrchestrationContext,
	OrchestrationResult,
	ResultStatus,
)
from .events import EventEmitter, EventHub, SubAgentEvent
from .pool import Worker, WorkerPool, WorkerStatus

logger = logging.getLogger(__name__)

CANCELED_RESPONSE = "Canceled."

# Coordinator event names
SUB_AGENT_EVENT = "subAgentEvent"
CONTEXT_UPDATE = "contextUpdate"
ERROR = "error"
WARNING = "warning"


class FastModeCoordinator(EventEmitter):
	"""
	Top-level orchestration engine.

	Events (register with on()):
	- subAgentEvent: every SubAgentEvent from the hub
	- contextUpdate: the OrchestrationContext after every change
	- error: dict with context_id, agent_id, task_id and error for worker failures
	- warning: dict with context_id and reason when a context is interrupted
	"""

	def __init__(
		self,
		factory: AgentSessionFactory,
		config: Optional[Config] = None,
		analyzer: Optional[TaskAnalyzer] = None,
		on_status_change: Optional[Callable[[OrchestrationContext], None]] = None,
		on_sub_agent_event: Optional[Callable[[SubAgentEvent], None]] = None,
	):
		super().__init__()
		self.config = config or get_config()
		self.analyzer = analyzer or TaskAnalyzer(planning_threshold=self.config.planning_threshold)
		self.pool = WorkerPool(factory)
		self.hub = EventHub()
		self.on_status_change = on_status_change
		self.on_sub_agent_event = on_sub_agent_event

		self._contexts: dict[str, OrchestrationContext] = {}
		self._context_counter = itertools.count(1)
		self._background: set[asyncio.Task] = set()

		self.hub.on(EventHub.EVENT, self._forward_sub_agent_event)

	# ==================== Ids and registry ====================

	def _generate_context_id(self) -> str:
		return f"orch-{int(time.time() * 1000)}-{next(self._context_counter)}"

	@staticmethod
	def _generate_task_id() -> str:
		return f"task-{int(time.time() * 1000)}-{secrets.token_hex(3)}"

	def _require(self, context_id: str) -> OrchestrationContext:
		context = self._contexts.get(context_id)
		if context is None:
			raise ContextNotFoundError(context_id)
		return context

	def _update_context(self, context: OrchestrationContext, **changes) -> None:
		"""Apply changes, refusing backwards status moves, and notify listeners."""
		status = changes.pop("status", None)
		if status is not None:
			if context.status.can_advance_to(status):
				if status != context.status:
					logger.debug(f"{context.id}: {context.status.value} -> {status.value}")
				context.status = status
				if status.is_terminal:
					context.completed_at = datetime.now().isoformat()
			else:
				logger.debug(f"{context.id}: ignoring {status.value} while {context.status.value}")

		for key, value in changes.items():
			setattr(context, key, value)

		self.emit(CONTEXT_UPDATE, context)
		if self.on_status_change:
			try:
				self.on_status_change(context)
			except Exception as e:
				logger.error(f"on_status_change callback failed: {e}")

	def _forward_sub_agent_event(self, event: SubAgentEvent) -> None:
		self.emit(SUB_AGENT_EVENT, event)
		if self.on_sub_agent_event:
			try:
				self.on_sub_agent_event(event)
			except Exception as e:
				logger.error(f"on_sub_agent_event callback failed: {e}")

	def _report_error(self, context: OrchestrationContext, agent_id: str, task_id: str, error: Exception) -> None:
		self.emit(ERROR, {
			"context_id": context.id,
			"agent_id": agent_id,
			"task_id": task_id,
			"error": error,
		})

	def _spawn_background(self, coro) -> asyncio.Task:
		task = asyncio.create_task(coro)
		self._background.add(task)
		task.add_done_callback(self._background.discard)
		return task

	async def _spawn_for(self, context: OrchestrationContext, tier: WorkerTier) -> Worker:
		"""Spawn a worker owned by a context and route its events through the hub."""
		worker = await self.pool.spawn(tier)
		context.sub_agent_ids.append(worker.id)
		self.hub.subscribe(worker.id, worker)
		return worker

	# ==================== Triage ====================

	async def triage(self, task: Union[UserTask, str]) -> tuple[str, TaskAnalysis]:
		"""
		Create a context for a request and decide how to route it.

		Args:
			task: The request; a bare string becomes a NORMAL priority task

		Returns:
			(context_id, analysis). The analysis embeds the plan if planning ran.
		"""
		if isinstance(task, str):
			task = UserTask(content=task)
		if not task.id:
			task = replace(task, id=self._generate_task_id())

		context = OrchestrationContext(id=self._generate_context_id(), initial_task=task)
		self._contexts[context.id] = context
		self._update_context(context, status=ContextStatus.TRIAGING)

		analysis = self.analyzer.analyze(task.content, task.context)
		self._update_context(context, analysis=analysis)
		logger.info(
			f"Triaged {context.id}: complexity={analysis.complexity} intent={analysis.intent} "
			f"tier={analysis.suggested_tier.value} planning={analysis.needs_planning}"
		)

		if analysis.complexity >= self.config.planning_threshold or analysis.needs_planning:
			plan = await self._plan(context, analysis)
			analysis = replace(analysis, plan=plan)
			self._update_context(context, plan=plan, analysis=analysis)

		return context.id, analysis

	async def _plan(self, context: OrchestrationContext, analysis: TaskAnalysis) -> Plan:
		self._update_context(context, status=ContextStatus.PLANNING)
		task = context.initial_task
		planning_task = UserTask(
			id=f"{task.id}-plan",
			content=build_planning_prompt(task, analysis),
			priority=task.priority,
		)

		agent_id = ""
		try:
			worker = await self._spawn_for(context, WorkerTier.PLANNING)
			agent_id = worker.id
			response = await self.pool.execute(worker.id, planning_task)
		except Exception as e:
			logger.warning(f"Planning failed for {context.id}, using default plan: {e}")
			self._report_error(context, agent_id, planning_task.id, e)
			response = None

		return parse_plan(response, task.content, analysis.suggested_tier)

	# ==================== Delegation ====================

	async def delegate(self, context_id: str) -> list[str]:
		"""
		Start workers for a triaged context.

		Planned tasks run concurrently except where depends_on orders them.
		Without a plan, the original request runs on one worker of the
		suggested tier. Returns immediately once scheduling is set up.

		Returns:
			The context's task ids, in plan order

		Raises:
			ContextNotFoundError: Unknown context id
			MissingAnalysisError: Context has not been triaged
		"""
		context = self._require(context_id)
		if context.analysis is None:
			raise MissingAnalysisError(context_id)

		self._update_context(context, status=ContextStatus.DELEGATING)

		plan = context.plan or context.analysis.plan
		if plan is not None and plan.decomposition:
			planned = _schedulable_tasks(plan)
			units = [
				(
					UserTask(id=p.task_id, content=p.description, priority=context.initial_task.priority),
					p.suggested_tier,
					p.depends_on,
				)
				for p in planned
			]
		else:
			units = [(context.initial_task, context.analysis.suggested_tier, [])]

		task_ids = [unit[0].id for unit in units]
		self._update_context(context, task_ids=task_ids)

		loop = asyncio.get_running_loop()
		futures: dict[str, asyncio.Future] = {tid: loop.create_future() for tid in task_ids}
		runners = [
			self._spawn_background(self._run_task(
				context,
				task,
				tier,
				[futures[dep] for dep in depends_on if dep in futures],
				futures[task.id],
			))
			for task, tier, depends_on in units
		]
		self._spawn_background(self._finish(context, runners))

		self._update_context(context, status=ContextStatus.RUNNING)
		logger.info(f"Delegated {len(task_ids)} task(s) for {context.id}")
		return list(context.task_ids)

	async def _run_task(
		self,
		context: OrchestrationContext,
		task: UserTask,
		tier: WorkerTier,
		dependencies: list[asyncio.Future],
		future: asyncio.Future,
	) -> Optional[OrchestrationResult]:
		"""Run one task after its dependencies settle. Only this coroutine resolves `future`."""
		result: Optional[OrchestrationResult] = None
		try:
			if dependencies:
				await asyncio.gather(*dependencies)
			if context.status == ContextStatus.CANCELED:
				logger.debug(f"{context.id}: skipping {task.id}, context canceled")
				return None

			agent_id = ""
			output: Optional[str] = None
			error: Optional[Exception] = None
			try:
				worker = await self._spawn_for(context, tier)
				agent_id = worker.id
				# Cancel may land while spawn is suspended, before the worker is interruptible
				if context.status == ContextStatus.CANCELED:
					logger.debug(f"{context.id}: not running {task.id}, context canceled")
					return None
				output = await self.pool.execute(worker.id, task)
			except Exception as e:
				error = e

			if context.status == ContextStatus.CANCELED:
				logger.debug(f"{context.id}: dropping late result for {task.id}")
				return None

			if error is not None:
				self._report_error(context, agent_id, task.id, error)
				result = OrchestrationResult(
					task_id=task.id,
					agent_id=agent_id,
					tier=tier,
					status=ResultStatus.FAILED,
					error=str(error) or type(error).__name__,
				)
			else:
				result = OrchestrationResult(
					task_id=task.id,
					agent_id=agent_id,
					tier=tier,
					status=ResultStatus.COMPLETED,
					output=output,
				)

			results = dict(context.results)
			results[task.id] = result
			self._update_context(context, results=results)
			return result
		finally:
			if not future.done():
				future.set_result(result)

	async def _finish(self, context: OrchestrationContext, runners: list[asyncio.Task]) -> None:
		settled = await asyncio.gather(*runners)
		any_failed = any(r is not None and r.status == ResultStatus.FAILED for r in settled)
		self._update_context(
			context,
			status=ContextStatus.FAILED if any_failed else ContextStatus.COMPLETE,
		)
		logger.info(f"Context {context.id} finished: {context.status.value}")

	# ==================== Waiting, running and aggregation ====================

	async def wait_for_context(self, context_id: str, timeout: Optional[float] = None) -> OrchestrationContext:
		"""
		Wait until a context is complete, failed or canceled.

		Args:
			context_id: Context to wait on
			timeout: Seconds to wait; defaults to config.wait_timeout

		Raises:
			OrchestrationTimeoutError: The bound elapsed first. The context keeps running.
		"""
		context = self._require(context_id)
		if context.is_terminal:
			return context

		if timeout is None:
			timeout = self.config.wait_timeout

		settled = asyncio.Event()

		def on_update(updated: OrchestrationContext) -> None:
			if updated.id == context_id and updated.is_terminal:
				settled.set()

		self.on(CONTEXT_UPDATE, on_update)
		try:
			await asyncio.wait_for(settled.wait(), timeout)
		except asyncio.TimeoutError:
			raise OrchestrationTimeoutError(context_id, timeout) from None
		finally:
			self.off(CONTEXT_UPDATE, on_update)

		return context

	async def start(
		self,
		task: Union[UserTask, str],
		timeout: Optional[float] = None,
	) -> tuple[str, "asyncio.Task[str]"]:
		"""Triage and delegate, then return the context id and a task resolving to the answer."""
		context_id, _ = await self.triage(task)
		await self.delegate(context_id)
		done = self._spawn_background(self._complete(context_id, timeout))
		return context_id, done

	async def run(self, task: Union[UserTask, str], timeout: Optional[float] = None) -> tuple[str, str]:
		"""Orchestrate a request end to end. Returns (context_id, response)."""
		context_id, done = await self.start(task, timeout)
		return context_id, await done

	async def _complete(self, context_id: str, timeout: Optional[float]) -> str:
		context = await self.wait_for_context(context_id, timeout)
		if context.status == ContextStatus.CANCELED:
			return CANCELED_RESPONSE

		if not needs_summarizer(context, self.config.summarizer_complexity_threshold):
			return fallback_aggregate(context)

		try:
			return await self._summarize(context)
		except Exception as e:
			logger.warning(f"Summarizer failed for {context.id}, using fallback: {e}")
			return fallback_aggregate(context)

	async def _summarize(self, context: OrchestrationContext) -> str:
		synth_task = UserTask(
			id=f"{context.id}-synth",
			content=build_summarizer_prompt(context),
			priority=context.initial_task.priority,
		)
		agent_id = ""
		try:
			worker = await self._spawn_for(context, WorkerTier.STANDARD)
			agent_id = worker.id
			return await self.pool.execute(worker.id, synth_task)
		except Exception as e:
			self._report_error(context, agent_id, synth_task.id, e)
			raise

	async def ask_opus(self, context_id: str, question: str) -> str:
		"""
		Ask the context's planning worker a follow-up question.

		Reuses a planning-tier worker that is not mid-task, usually the one
		that produced the plan, or spawns one.
		The answer is appended to the plan's refinements.
		"""
		context = self._require(context_id)

		worker_id = next(
			(
				wid for wid in context.sub_agent_ids
				if (w := self.pool.get_agent(wid)) is not None
				and w.tier == WorkerTier.PLANNING
				and w.status != WorkerStatus.RUNNING
			),
			None,
		)
		if worker_id is None:
			worker_id = (await self._spawn_for(context, WorkerTier.PLANNING)).id

		refinement_task = UserTask(id=self._generate_task_id(), content=build_refinement_prompt(question))
		try:
			answer = await self.pool.execute(worker_id, refinement_task)
		except Exception as e:
			self._report_error(context, worker_id, refinement_task.id, e)
			raise

		if context.plan is not None:
			context.plan.refinements.append(answer)
			self._update_context(context)

		return answer

	# ==================== Cancellation and lookup ====================

	async def interrupt_context(self, context_id: str, reason: Optional[str] = None) -> None:
		"""Interrupt every worker of a context and mark it canceled. Unknown ids are ignored."""
		context = self._contexts.get(context_id)
		if context is None:
			return

		if context.is_terminal:
			logger.warning(f"Canceling {context_id} after it already reached {context.status.value}")
		else:
			logger.info(f"Canceling {context_id}" + (f": {reason}" if reason else ""))

		# Runners woken by the interrupt must already see canceled
		self._update_context(context, status=ContextStatus.CANCELED)
		await asyncio.gather(*(self.pool.interrupt(wid) for wid in list(context.sub_agent_ids)))

		if reason:
			self.emit(WARNING, {"context_id": context_id, "reason": reason})

	def get_context(self, context_id: str) -> Optional[OrchestrationContext]:
		return self._contexts.get(context_id)

	def get_sub_agents(self, context_id: Optional[str] = None) -> list[Worker]:
		"""All tracked workers, or only those spawned for one context."""
		if context_id is None:
			return self.pool.get_all_agents()
		context = self._require(context_id)
		return [w for wid in context.sub_agent_ids if (w := self.pool.get_agent(wid)) is not None]

	def get_event_coordinator(self) -> EventHub:
		return self.hub

	async def dispose(self) -> None:
		"""Stop background scheduling, release every worker and forget all contexts.

		The coordinator stays usable afterwards.
		"""
		pending = [t for t in self._background if not t.done()]
		for t in pending:
			t.cancel()
		if pending:
			await asyncio.gather(*pending, return_exceptions=True)

		await self.pool.terminate_all()
		self.hub.clear()
		self.hub.on(EventHub.EVENT, self._forward_sub_agent_event)
		self._contexts.clear()
		logger.debug("Coordinator disposed")


def _schedulable_tasks(plan: Plan) -> list[PlannedTask]:
	"""
	Planned tasks with dependency lists safe to wait on.

	Duplicate task ids keep their first occurrence. Dependencies on unknown
	ids or on the task itself are dropped, as is any dependency that would
	close a cycle.
	"""
	tasks: dict[str, PlannedTask] = {}
	for p in plan.decomposition:
		if p.task_id in tasks:
			logger.warning(f"Duplicate task id in plan: {p.task_id}")
			continue
		tasks[p.task_id] = p

	deps: dict[str, list[str]] = {}

	def reaches(start: str, target: str) -> bool:
		stack, seen = [start], set()
		while stack:
			node = stack.pop()
			if node == target:
				return True
			if node in seen:
				continue
			seen.add(node)
			stack.extend(deps.get(node, ()))
		return False

	for tid, p in tasks.items():
		kept: list[str] = []
		for dep in p.depends_on:
			if dep not in tasks:
				logger.warning(f"Ignoring unknown dependency {tid} -> {dep}")
				continue
			if dep == tid or dep in kept:
				continue
			deps[tid] = kept
			if reaches(dep, tid):
				logger.warning(f"Dropping cyclic dependency {tid} -> {dep}")
				continue
			kept.append(dep)
		deps[tid] = kept

	return [
		p if p.depends_on == deps[tid] else p.model_copy(update={"depends_on": deps[tid]})
		for tid, p in tasks.items()
	]
