"""Tests for the configuration system."""

import os
from pathlib import Path
from unittest.mock import patch

from fastmode.config import Config, _apply_env_overrides, load_config
from fastmode.models import WorkerTier


def test_config_defaults():
	"""Config should have sensible defaults."""
	config = Config()
	assert config.config_dir.is_absolute()
	assert config.data_dir.is_absolute()
	assert config.log_dir == config.data_dir / "logs"
	assert config.planning_threshold == 8
	assert config.summarizer_complexity_threshold == 6
	assert config.wait_timeout == 600.0
	assert config.claude_binary == "claude"


def test_config_env_overrides():
	"""Environment variables should override defaults."""
	config = Config()
	with patch.dict(os.environ, {
		"FASTMODE_DATA_DIR": "/tmp/test-data",
		"FASTMODE_CONFIG_DIR": "/tmp/test-config",
		"FASTMODE_PLANNING_THRESHOLD": "7",
		"FASTMODE_WAIT_TIMEOUT": "12.5",
		"FASTMODE_MODEL_FAST": "haiku-custom",
	}):
		config = _apply_env_overrides(config)
		assert config.data_dir == Path("/tmp/test-data")
		assert config.config_dir == Path("/tmp/test-config")
		# Derived paths should be recomputed
		assert config.log_dir == Path("/tmp/test-data/logs")
		assert config.planning_threshold == 7
		assert config.wait_timeout == 12.5
		assert config.model_id_for(WorkerTier.FAST) == "haiku-custom"


def test_config_ensure_dirs(tmp_path: Path):
	"""ensure_dirs should create all required directories."""
	config = Config(
		config_dir=tmp_path / "config",
		data_dir=tmp_path / "data",
	)
	assert not config.config_dir.exists()

	config.ensure_dirs()

	assert config.config_dir.exists()
	assert config.data_dir.exists()
	assert config.log_dir.exists()


def test_load_config_reads_toml(tmp_path: Path):
	"""config.toml values should apply, with env vars taking precedence."""
	config_dir = tmp_path / "config"
	config_dir.mkdir()
	(config_dir / "config.toml").write_text(
		'planning_threshold = 6\n'
		'claude_binary = "/opt/claude"\n'
		'summarizer_complexity_threshold = 4\n'
		'\n'
		'[models]\n'
		'smart-opus = "opus-pinned"\n'
		'haiku = "haiku-pinned"\n'
	)

	with patch.dict(os.environ, {
		"FASTMODE_CONFIG_DIR": str(config_dir),
		"FASTMODE_DATA_DIR": str(tmp_path / "data"),
		"FASTMODE_SUMMARIZER_THRESHOLD": "9",
	}):
		config = load_config()

	assert config.planning_threshold == 6
	assert config.claude_binary == "/opt/claude"
	assert config.summarizer_complexity_threshold == 9
	assert config.model_id_for(WorkerTier.PLANNING) == "opus-pinned"
	assert config.model_id_for(WorkerTier.FAST) == "haiku-pinned"
	assert config.model_id_for(WorkerTier.STANDARD) == "claude-sonnet-4-5-20250929"
	assert config.data_dir.exists()
	assert config.log_dir.exists()
