from __future__ import annotations

import os

ENV_HENE_LOG_LEVEL = "HENE_LOG_LEVEL"
ENV_HENE_PRINT_OUTPUT = "HENE_PRINT_OUTPUT"
ENV_HENE_MARKER = "HENE_MARKER"

DEFAULT_MARKER = "HeneElement"
_FALSY = {"", "0", "false", "False", "no"}


class Env:
	"""Typed view over the HENE_* environment variables, read on access."""

	@property
	def log_level(self) -> str:
		return os.environ.get(ENV_HENE_LOG_LEVEL, "WARNING").upper()

	@log_level.setter
	def log_level(self, value: str) -> None:
		os.environ[ENV_HENE_LOG_LEVEL] = value

	@property
	def print_output(self) -> bool:
		return os.environ.get(ENV_HENE_PRINT_OUTPUT, "") not in _FALSY

	@property
	def marker(self) -> str:
		return os.environ.get(ENV_HENE_MARKER) or DEFAULT_MARKER


env = Env()

__all__ = [
	"DEFAULT_MARKER",
	"ENV_HENE_LOG_LEVEL",
	"ENV_HENE_MARKER",
	"ENV_HENE_PRINT_OUTPUT",
	"Env",
	"env",
]
