import logging
from pathlib import Path

import typer
from sv_formatter import ConfigError, FormatResult, FormatterEngine, Severity

from .config import FmtConfig

logger = logging.getLogger(__name__)

app = typer.Typer(help="sv-fmt - SystemVerilog source formatter")

SOURCE_SUFFIXES = frozenset({".sv", ".svh", ".vh", ".v"})
LINE_LENGTH_RULE = "F009"


def collect_files(paths: list[Path]) -> tuple[list[Path], list[str]]:
    """Expand directories to SystemVerilog sources; returns files and problems"""
    files: set[Path] = set()
    problems: list[str] = []
    for path in paths:
        if path.is_dir():
            files.update(p for p in path.rglob("*") if p.is_file() and p.suffix.lower() in SOURCE_SUFFIXES)
        elif path.is_file():
            files.add(path)
        else:
            problems.append(f"error: no such file or directory: {path}")
    return sorted(files), problems


def report(result: FormatResult, check: bool) -> None:
    for d in result.diagnostics:
        if check and d.rule_id == LINE_LENGTH_RULE:
            # check output omits the split-point note
            typer.echo(f"{d.message.partition(';')[0]} in {result.file_path}", err=True)
        elif not check or d.severity == Severity.ERROR:
            typer.echo(f"{d.severity.value}: {result.file_path}:{d.line} [{d.rule_id}] - {d.message}", err=True)


@app.command()
def main(
    files: list[Path] = typer.Argument(..., help="Files or directories to format"),
    in_place: bool = typer.Option(False, "--in-place", "-i", help="Rewrite changed files in place"),
    check: bool = typer.Option(False, "--check", help="Only report files that need formatting"),
    config_file: Path | None = typer.Option(None, "--config", help="Path to config file (default: ./sv-fmt.toml)"),
    jobs: int | None = typer.Option(None, "--jobs", "-j", min=1, help="Worker threads (default: CPU count)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Format SystemVerilog files"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if check and in_place:
        typer.echo("error: --check and --in-place cannot be used together", err=True)
        raise typer.Exit(code=1)

    try:
        config = FmtConfig(config_file)
    except ConfigError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1)
    if config.path is not None:
        logger.debug("using configuration from %s", config.path)

    paths, problems = collect_files(files)
    for problem in problems:
        typer.echo(problem, err=True)
    if not paths:
        if not problems:
            typer.echo("error: no SystemVerilog files found to format", err=True)
        raise typer.Exit(code=1)
    if len(paths) > 1 and not (in_place or check):
        typer.echo("error: formatting multiple files requires --in-place or --check", err=True)
        raise typer.Exit(code=1)

    engine = FormatterEngine.default(config.options)
    results = engine.format_files(paths, jobs=jobs)

    failed = bool(problems)
    for result in results.results:
        report(result, check)
        if result.errors:
            failed = True
        elif check:
            if result.modified:
                typer.echo(f"needs formatting: {result.file_path}", err=True)
                failed = True
            if any(d.rule_id == LINE_LENGTH_RULE for d in result.diagnostics):
                failed = True
        elif in_place:
            if result.modified:
                try:
                    Path(result.file_path).write_text(result.source, encoding="utf-8", newline="\n")
                except OSError as e:
                    typer.echo(f"error: cannot write {result.file_path}: {e.strerror or e}", err=True)
                    failed = True
                else:
                    logger.info("formatted %s", result.file_path)
        else:
            typer.echo(result.source, nl=False)

    if results.interrupted:
        typer.echo(f"interrupted after {len(results.results)} of {results.total_files} file(s)", err=True)
        failed = True
    logger.debug("%d file(s), %d modified, %d with errors",
                 results.total_files, results.modified_files, results.error_files)
    if failed:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
