"""
Agent sessions - the injected capability that actually talks to a model.

The orchestrator never inspects provider details; it only needs something
satisfying AgentSessionFactory. ClaudeCliSessionFactory is the bundled
implementation, running `claude --print` once per task.
"""

import asyncio
import itertools
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Protocol, runtime_checkable

from .config import Config, get_config
from .errors import SessionError
from .models import UserTask, WorkerTier

logger = logging.getLogger(__name__)


@runtime_checkable
class AgentSessionFactory(Protocol):
	"""Protocol for the model-calling transport."""

	async def spawn(self, tier: WorkerTier) -> Any:
		"""Create a session for a tier and return an opaque handle."""
		...

	async def execute(self, handle: Any, task: UserTask) -> str:
		"""Run one task to completion; raise on failure."""
		...

	async def interrupt(self, handle: Any) -> bool:
		"""Ask an in-flight call to stop. Best effort."""
		...

	async def terminate(self, handle: Any) -> None:
		"""Release the session."""
		...


@dataclass
class ClaudeCliSession:
	"""Handle for one `claude --print` backed worker."""
	id: str
	tier: WorkerTier
	model_id: str
	process: Optional[asyncio.subprocess.Process] = None
	interrupted: bool = False
	closed: bool = False


class ClaudeCliSessionFactory:
	"""
	Session factory backed by the Claude CLI in print mode.

	Each execute() call starts a fresh `claude --print --model <id>` process
	with the prompt on stdin, so a session is just a tier and model binding.
	"""

	def __init__(
		self,
		config: Optional[Config] = None,
		working_dir: Optional[Path] = None,
		extra_args: tuple[str, ...] = (),
	):
		self.config = config or get_config()
		self.binary = self.config.claude_binary
		self.working_dir = Path(working_dir or self.config.working_dir).expanduser()
		self.extra_args = extra_args
		self._counter = itertools.count(1)

	async def spawn(self, tier: WorkerTier) -> ClaudeCliSession:
		if shutil.which(self.binary) is None:
			raise SessionError(f"Claude CLI not found: '{self.binary}'. Is it installed?")
		if not self.working_dir.is_dir():
			raise SessionError(f"Directory not found: {self.working_dir}")

		session = ClaudeCliSession(
			id=f"cli-{next(self._counter)}",
			tier=tier,
			model_id=self.config.model_id_for(tier),
		)
		logger.debug(f"Spawned CLI session {session.id} ({session.model_id})")
		return session

	async def execute(self, handle: ClaudeCliSession, task: UserTask) -> str:
		if handle.closed:
			raise SessionError(f"Session {handle.id} is closed")

		prompt = build_task_prompt(task)
		logger.info(f"[{handle.id}] Sending prompt ({len(prompt)} chars): {prompt[:100]}...")

		handle.interrupted = False
		try:
			process = await asyncio.create_subprocess_exec(
				self.binary,
				"--print",
				"--model", handle.model_id,
				"--output-format", "text",
				*self.extra_args,
				stdin=asyncio.subprocess.PIPE,
				stdout=asyncio.subprocess.PIPE,
				stderr=asyncio.subprocess.PIPE,
				cwd=str(self.working_dir),
				env=os.environ.copy(),
			)
		except FileNotFoundError:
			raise SessionError("Claude CLI not found. Is it installed?")

		handle.process = process
		try:
			stdout, stderr = await process.communicate(input=prompt.encode())
		except BaseException:
			# Cancellation included: never leave the child running
			if process.returncode is None:
				logger.warning(f"[{handle.id}] Aborted, killing Claude CLI process")
				process.kill()
				await process.wait()
			raise
		finally:
			handle.process = None

		stdout_text = stdout.decode() if stdout else ""
		stderr_text = stderr.decode() if stderr else ""

		if handle.interrupted:
			raise SessionError(f"Session {handle.id} interrupted")

		if process.returncode != 0:
			error_msg = stderr_text.strip() or f"Exit code {process.returncode}"
			logger.error(f"[{handle.id}] Claude CLI error: {error_msg}")
			raise SessionError(f"Claude CLI failed: {error_msg}")

		logger.info(f"[{handle.id}] Response received ({len(stdout_text)} chars)")
		return stdout_text.strip()

	async def interrupt(self, handle: ClaudeCliSession) -> bool:
		process = handle.process
		if process is None or process.returncode is not None:
			return False
		handle.interrupted = True
		try:
			process.terminate()
		except ProcessLookupError:
			return False
		return True

	async def terminate(self, handle: ClaudeCliSession) -> None:
		await self.interrupt(handle)
		handle.closed = True


def build_task_prompt(task: UserTask) -> str:
	"""Render a task and its attached context into one prompt."""
	if task.context is None:
		return task.content

	parts = [task.content]
	ctx = task.context

	if ctx.files:
		parts.extend(["", "## Relevant files"])
		parts.extend(f"- {path}" for path in ctx.files)

	if ctx.constraints:
		parts.extend(["", "## Constraints"])
		parts.extend(f"- {c}" for c in ctx.constraints)

	if ctx.previous_messages:
		parts.extend(["", "## Conversation so far"])
		parts.extend(f"{m.role}: {m.content}" for m in ctx.previous_messages)

	return "\n".join(parts)
