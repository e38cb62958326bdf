"""Snapshot tests: every tests/fixtures/<suite>/source.js compiles to expected.js."""

from pathlib import Path

import pytest
from hene import CompileOptions, compile_source
from hene.errors import Diagnostic

FIXTURES = Path(__file__).parent / "fixtures"
SUITES = sorted(p.name for p in FIXTURES.iterdir() if (p / "source.js").exists())


@pytest.mark.parametrize("suite", SUITES)
def test_fixture(suite: str):
	source = (FIXTURES / suite / "source.js").read_text()
	expected = (FIXTURES / suite / "expected.js").read_text()
	errors: list[Diagnostic] = []
	output = compile_source(source, CompileOptions(filename=suite, reporter=errors.append))
	assert errors == []
	assert output.strip() == expected.strip()


@pytest.mark.parametrize("suite", SUITES)
def test_compiled_output_is_not_recompiled(suite: str):
	expected = (FIXTURES / suite / "expected.js").read_text()
	assert compile_source(expected) == expected
