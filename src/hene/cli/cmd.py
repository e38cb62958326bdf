"""
Command-line interface for hene.
Compiles component files one at a time, mirrors a source tree into an output
directory, or only checks files for errors.
"""
# typer relies on function calls used as default values
# pyright: reportCallInDefaultInitializer=false

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from watchfiles import Change, watch

from hene.context import CompileOptions
from hene.env import ENV_HENE_LOG_LEVEL, env
from hene.pipeline import SOURCE_EXTENSIONS, CompileFailed, compile_strict, should_compile

logger = logging.getLogger(__name__)

cli = typer.Typer(
	name="hene",
	help="hene - compile HeneElement classes into custom elements",
	no_args_is_help=True,
)


def setup_logging(level: str | None) -> None:
	if level:
		env.log_level = level
	logging.basicConfig(
		level=env.log_level,
		format="%(message)s",
		datefmt="[%X]",
		handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
		force=True,
	)


def _options(path: Path) -> CompileOptions:
	return CompileOptions(filename=str(path), marker=env.marker, print_output=env.print_output)


def compile_file(path: Path) -> str:
	"""Compile one file; raises CompileFailed after printing the error."""
	code = path.read_text(encoding="utf-8")
	if not should_compile(path, code, env.marker):
		logger.debug("%s has no component, passing through", path)
		return code
	return compile_strict(code, _options(path))


def build_file(path: Path, src: Path, out: Path) -> bool:
	"""Compile or copy one file of `src` into its mirror under `out`."""
	target = out / path.relative_to(src)
	target.parent.mkdir(parents=True, exist_ok=True)
	try:
		output = compile_file(path)
	except CompileFailed:
		return False
	target.write_text(output, encoding="utf-8")
	logger.info("%s -> %s", path, target)
	return True


def _sources(src: Path) -> Iterable[Path]:
	for path in sorted(src.rglob("*")):
		if path.is_file() and path.suffix in SOURCE_EXTENSIONS:
			yield path


def build_tree(src: Path, out: Path) -> int:
	"""Build every source under `src`; returns the number of failures."""
	failed = 0
	for path in _sources(src):
		if not build_file(path, src, out):
			failed += 1
	return failed


def _log_level_option() -> str | None:
	return typer.Option(
		None,
		"--log-level",
		envvar=ENV_HENE_LOG_LEVEL,
		help="Logging level (DEBUG, INFO, WARNING, ERROR)",
	)


@cli.command("compile")
def compile_command(
	file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Component source file"),
	output: Path | None = typer.Option(None, "-o", "--output", help="Write here instead of stdout"),
	log_level: str | None = _log_level_option(),
):
	"""Compile one file and print or write the result."""
	setup_logging(log_level)
	try:
		result = compile_file(file)
	except CompileFailed:
		raise typer.Exit(1) from None
	if output is None:
		typer.echo(result, nl=False)
		return
	output.parent.mkdir(parents=True, exist_ok=True)
	output.write_text(result, encoding="utf-8")
	Console(stderr=True).log(f"✅ Wrote {output}")


@cli.command("build")
def build_command(
	src: Path = typer.Argument(..., exists=True, file_okay=False, help="Source directory"),
	out: Path = typer.Argument(..., help="Output directory"),
	watch_: bool = typer.Option(False, "--watch", help="Rebuild files when they change"),
	log_level: str | None = _log_level_option(),
):
	"""Compile every component under SRC into the mirrored path in OUT."""
	setup_logging(log_level)
	console = Console(stderr=True)
	failed = build_tree(src, out)
	if failed:
		console.log(f"❌ {failed} file(s) failed to compile")
	else:
		console.log(f"✅ Built {src} into {out}")
	if not watch_:
		raise typer.Exit(1 if failed else 0)

	root = src.resolve()
	console.log(f"👀 Watching {src} for changes")
	for changes in watch(root):
		for change, name in changes:
			path = Path(name)
			if path.suffix not in SOURCE_EXTENSIONS:
				continue
			if change == Change.deleted:
				target = out / path.relative_to(root)
				target.unlink(missing_ok=True)
				logger.info("Removed %s", target)
			elif path.is_file():
				build_file(path, root, out)


@cli.command("check")
def check_command(
	files: list[Path] = typer.Argument(..., exists=True, dir_okay=False, help="Files to check"),
	log_level: str | None = _log_level_option(),
):
	"""Compile files without writing anything; exit 1 if any fails."""
	setup_logging(log_level)
	failed = 0
	for path in files:
		try:
			compile_file(path)
		except CompileFailed:
			failed += 1
	console = Console(stderr=True)
	if failed:
		console.log(f"❌ {failed} of {len(files)} file(s) have errors")
		raise typer.Exit(1)
	console.log(f"✅ {len(files)} file(s) OK")


def main():
	"""Main CLI entry point."""
	try:
		cli()
	except Exception:
		console = Console()
		console.print_exception()
		raise typer.Exit(1) from None


if __name__ == "__main__":
	main()
