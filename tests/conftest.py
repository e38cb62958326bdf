import pytest
from hene.env import ENV_HENE_LOG_LEVEL, ENV_HENE_MARKER, ENV_HENE_PRINT_OUTPUT
from hene.errors import Diagnostic


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):  # pyright: ignore[reportUnusedFunction]
	for name in (ENV_HENE_LOG_LEVEL, ENV_HENE_MARKER, ENV_HENE_PRINT_OUTPUT):
		monkeypatch.delenv(name, raising=False)


@pytest.fixture
def diagnostics() -> list[Diagnostic]:
	"""Collects diagnostics when passed as a reporter."""
	return []
