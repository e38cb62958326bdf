import logging
from pathlib import Path

import pytest
from hene.cli.cmd import build_tree, cli, compile_file
from hene.env import ENV_HENE_LOG_LEVEL
from typer.testing import CliRunner

COMPONENT = """\
class Hello extends HeneElement {
  $render = `<p>Hello</p>`;
}
"""

BROKEN = "class Broken extends HeneElement {}\n"

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_logging(monkeypatch: pytest.MonkeyPatch):  # pyright: ignore[reportUnusedFunction]
	# The commands reconfigure the root logger and may write HENE_LOG_LEVEL
	monkeypatch.setenv(ENV_HENE_LOG_LEVEL, "WARNING")
	root = logging.getLogger()
	handlers, level = root.handlers[:], root.level
	yield
	root.handlers[:] = handlers
	root.setLevel(level)


@pytest.fixture
def project(tmp_path: Path) -> Path:
	src = tmp_path / "src"
	(src / "widgets").mkdir(parents=True)
	(src / "widgets" / "hello.js").write_text(COMPONENT)
	(src / "util.js").write_text("export const x = 1;\n")
	(src / "style.css").write_text("p {}\n")
	return src


def test_compile_prints_to_stdout(project: Path):
	result = runner.invoke(cli, ["compile", str(project / "widgets" / "hello.js")])
	assert result.exit_code == 0, result.output
	assert "class Hello extends HTMLElement {" in result.stdout
	assert 'const p = document.createElement("p");' in result.stdout


def test_compile_writes_output_file(project: Path, tmp_path: Path):
	target = tmp_path / "dist" / "hello.js"
	result = runner.invoke(
		cli, ["compile", str(project / "widgets" / "hello.js"), "-o", str(target)]
	)
	assert result.exit_code == 0, result.output
	assert "extends HTMLElement" in target.read_text()


def test_compile_error_exits_nonzero(tmp_path: Path):
	broken = tmp_path / "broken.js"
	broken.write_text(BROKEN)
	result = runner.invoke(cli, ["compile", str(broken)])
	assert result.exit_code == 1


def test_check(project: Path, tmp_path: Path):
	hello = str(project / "widgets" / "hello.js")
	assert runner.invoke(cli, ["check", hello]).exit_code == 0

	broken = tmp_path / "broken.js"
	broken.write_text(BROKEN)
	result = runner.invoke(cli, ["check", hello, str(broken), "--log-level", "error"])
	assert result.exit_code == 1


def test_build_mirrors_the_tree(project: Path, tmp_path: Path):
	out = tmp_path / "out"
	result = runner.invoke(cli, ["build", str(project), str(out)])
	assert result.exit_code == 0, result.output
	assert "extends HTMLElement" in (out / "widgets" / "hello.js").read_text()
	assert (out / "util.js").read_text() == "export const x = 1;\n"
	assert not (out / "style.css").exists()


def test_build_counts_failures(project: Path, tmp_path: Path):
	(project / "broken.js").write_text(BROKEN)
	out = tmp_path / "out"
	assert build_tree(project, out) == 1
	assert not (out / "broken.js").exists()
	assert (out / "widgets" / "hello.js").exists()
	result = runner.invoke(cli, ["build", str(project), str(out)])
	assert result.exit_code == 1


def test_compile_file_passes_plain_modules_through(project: Path):
	assert compile_file(project / "util.js") == "export const x = 1;\n"
