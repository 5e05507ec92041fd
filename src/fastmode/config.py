"""Configuration system using platformdirs for cross-platform paths."""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

import platformdirs

from .models import WorkerTier

APP_NAME = "fastmode"
APP_AUTHOR = "fastmode"

DEFAULT_MODEL_IDS = {
	WorkerTier.FAST.value: "claude-haiku-4-5-20251001",
	WorkerTier.STANDARD.value: "claude-sonnet-4-5-20250929",
	WorkerTier.PLANNING.value: "claude-opus-4-5-20251101",
}


@dataclass
class Config:
	"""Central configuration with XDG/platform conventions."""

	config_dir: Path = field(default_factory=lambda: Path(platformdirs.user_config_dir(APP_NAME)))
	data_dir: Path = field(default_factory=lambda: Path(platformdirs.user_data_dir(APP_NAME)))

	# Derived paths
	log_dir: Path = field(init=False)

	# Orchestration knobs
	planning_threshold: int = 8
	summarizer_complexity_threshold: int = 6
	wait_timeout: float = 600.0
	claude_binary: str = "claude"
	working_dir: Path = field(default_factory=Path.cwd)
	model_ids: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_MODEL_IDS))

	def __post_init__(self) -> None:
		self.log_dir = self.data_dir / "logs"

	def ensure_dirs(self) -> None:
		"""Create all required directories."""
		self.config_dir.mkdir(parents=True, exist_ok=True)
		self.data_dir.mkdir(parents=True, exist_ok=True)
		self.log_dir.mkdir(parents=True, exist_ok=True)

	def model_id_for(self, tier: WorkerTier) -> str:
		"""Concrete model identifier for a tier."""
		return self.model_ids.get(tier.value, DEFAULT_MODEL_IDS[tier.value])


_PATH_FIELDS = {"config_dir", "data_dir", "working_dir"}
_INT_FIELDS = {"planning_threshold", "summarizer_complexity_threshold"}
_FLOAT_FIELDS = {"wait_timeout"}


def _apply_env_overrides(config: Config) -> Config:
	"""Apply FASTMODE_* environment variable overrides."""
	env_map = {
		"FASTMODE_CONFIG_DIR": "config_dir",
		"FASTMODE_DATA_DIR": "data_dir",
		"FASTMODE_WORKING_DIR": "working_dir",
		"FASTMODE_PLANNING_THRESHOLD": "planning_threshold",
		"FASTMODE_SUMMARIZER_THRESHOLD": "summarizer_complexity_threshold",
		"FASTMODE_WAIT_TIMEOUT": "wait_timeout",
		"FASTMODE_CLAUDE_BINARY": "claude_binary",
	}
	for env_key, attr in env_map.items():
		val = os.getenv(env_key)
		if val:
			setattr(config, attr, _coerce(attr, val))

	tier_env = {
		"FASTMODE_MODEL_FAST": WorkerTier.FAST.value,
		"FASTMODE_MODEL_STANDARD": WorkerTier.STANDARD.value,
		"FASTMODE_MODEL_PLANNING": WorkerTier.PLANNING.value,
	}
	for env_key, tier in tier_env.items():
		val = os.getenv(env_key)
		if val:
			config.model_ids[tier] = val

	# Recompute derived paths after overrides
	config.__post_init__()
	return config


def _apply_toml(config: Config) -> Config:
	"""Apply config.toml overrides if file exists."""
	toml_path = config.config_dir / "config.toml"
	if not toml_path.exists():
		return config

	with open(toml_path, "rb") as f:
		data = tomllib.load(f)

	for key, val in data.items():
		if key == "models" and isinstance(val, dict):
			for tier, model_id in val.items():
				config.model_ids[WorkerTier.coerce(tier).value] = str(model_id)
		elif hasattr(config, key):
			setattr(config, key, _coerce(key, val))

	# Recompute derived paths after toml overrides
	config.__post_init__()
	return config


def _coerce(attr: str, val):
	if attr in _PATH_FIELDS:
		return Path(os.path.expanduser(str(val)))
	if attr in _INT_FIELDS:
		return int(val)
	if attr in _FLOAT_FIELDS:
		return float(val)
	return val


def load_config() -> Config:
	"""Load config with precedence: env vars > config.toml > defaults."""
	config = Config()
	config_dir = os.getenv("FASTMODE_CONFIG_DIR")
	if config_dir:
		config.config_dir = _coerce("config_dir", config_dir)
	config = _apply_toml(config)
	config = _apply_env_overrides(config)
	config.ensure_dirs()
	return config


# Singleton
_config: Config | None = None


def get_config() -> Config:
	"""Get or create the global config instance."""
	global _config
	if _config is None:
		_config = load_config()
	return _config
