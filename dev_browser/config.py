"""Configuration for dev-browser, read from the environment (and a .env file if present)."""

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
	value = os.getenv(name)
	if value is None or value.strip() == '':
		return default
	return value.strip()


class DomConfig(BaseModel):
	"""Tunable knobs of the extraction pipeline.

	The two thresholds are heuristics, not semantic law: they are pinned as regression
	baselines in the test suite and can be overridden per process via the environment.
	"""

	model_config = ConfigDict(extra='forbid', validate_assignment=True)

	containment_threshold: float = Field(default=0.95, gt=0.0, le=1.0)
	occlusion_threshold: float = Field(default=0.95, gt=0.0, le=1.0)
	max_text_length: int = Field(default=100, ge=1)
	# None means the whole document is considered, not only the visible viewport
	viewport_expansion: int | None = Field(default=None, ge=0)
	logging_level: Literal['debug', 'info', 'warning', 'error'] = 'info'
	setup_logging: bool = True

	@field_validator('logging_level', mode='before')
	@classmethod
	def _lower_level(cls, value: str) -> str:
		return value.lower() if isinstance(value, str) else value

	@classmethod
	def from_env(cls) -> 'DomConfig':
		values: dict[str, str] = {}
		for field_name, env_name in (
			('containment_threshold', 'DEV_BROWSER_CONTAINMENT_THRESHOLD'),
			('occlusion_threshold', 'DEV_BROWSER_OCCLUSION_THRESHOLD'),
			('max_text_length', 'DEV_BROWSER_MAX_TEXT_LENGTH'),
			('viewport_expansion', 'DEV_BROWSER_VIEWPORT_EXPANSION'),
			('logging_level', 'DEV_BROWSER_LOGGING_LEVEL'),
			('setup_logging', 'DEV_BROWSER_SETUP_LOGGING'),
		):
			value = _env(env_name)
			if value is not None:
				values[field_name] = value
		return cls.model_validate(values)


CONFIG = DomConfig.from_env()
