"""Tests for tier names and override parsing."""

from fastmode.model_router import display_name, parse_model_override, tier_from_short_name
from fastmode.models import WorkerTier


def test_parse_override_prefix():
	"""An @opus prefix should pin the planning tier and strip the prefix."""
	override = parse_model_override("@opus review this code")
	assert override.tier == WorkerTier.PLANNING
	assert override.task == "review this code"


def test_parse_override_case_insensitive_multiline():
	override = parse_model_override("@Haiku list files\nin src")
	assert override.tier == WorkerTier.FAST
	assert override.task == "list files\nin src"


def test_no_override():
	override = parse_model_override("just a normal message")
	assert override.tier is None
	assert override.task == "just a normal message"


def test_prefix_must_lead():
	assert parse_model_override("ask @opus later").tier is None


def test_tier_from_short_name():
	assert tier_from_short_name("sonnet") == WorkerTier.STANDARD
	assert tier_from_short_name("OPUS") == WorkerTier.PLANNING
	assert tier_from_short_name("gpt") == WorkerTier.STANDARD


def test_display_name():
	assert display_name(WorkerTier.FAST) == "Haiku 4.5"


def test_tier_coerce():
	"""Unknown tier strings should normalize to the general tier."""
	assert WorkerTier.coerce("fast") == WorkerTier.FAST
	assert WorkerTier.coerce("smart-opus") == WorkerTier.PLANNING
	assert WorkerTier.coerce("turbo") == WorkerTier.STANDARD
	assert WorkerTier.coerce(None) == WorkerTier.STANDARD
