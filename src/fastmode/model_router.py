"""Model router - tier names, display labels and user override parsing."""

import re
from dataclasses import dataclass
from typing import Optional

from .models import WorkerTier

MODEL_DISPLAY = {
	WorkerTier.FAST: "Haiku 4.5",
	WorkerTier.STANDARD: "Sonnet 4.5",
	WorkerTier.PLANNING: "Opus 4.5",
}

# Short names used in worker ids and override prefixes
SHORT_NAMES = {
	WorkerTier.FAST: "haiku",
	WorkerTier.STANDARD: "sonnet",
	WorkerTier.PLANNING: "opus",
}

_OVERRIDE_PREFIX = re.compile(r"^@(opus|sonnet|haiku)\s+(.+)", re.I | re.S)


@dataclass(frozen=True)
class ModelOverride:
	"""Result of parsing a user message for a tier prefix."""
	task: str
	tier: Optional[WorkerTier] = None


def tier_from_short_name(name: str) -> WorkerTier:
	"""Map 'haiku' / 'sonnet' / 'opus' to a tier; unknown names map to STANDARD."""
	lowered = name.lower()
	for tier, short in SHORT_NAMES.items():
		if short == lowered:
			return tier
	return WorkerTier.STANDARD


def parse_model_override(text: str) -> ModelOverride:
	"""
	Parse an explicit tier prefix from user input.

	'@opus review this code' -> ModelOverride(task='review this code', tier=PLANNING)
	'just a normal message' -> ModelOverride(task='just a normal message')
	"""
	match = _OVERRIDE_PREFIX.match(text)
	if match:
		return ModelOverride(task=match.group(2), tier=tier_from_short_name(match.group(1)))
	return ModelOverride(task=text)


def display_name(tier: WorkerTier) -> str:
	"""Human-readable model label for a tier."""
	return MODEL_DISPLAY[tier]
