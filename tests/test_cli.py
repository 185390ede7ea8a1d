import pytest
from typer.testing import CliRunner

from sv_cli.main import app, collect_files

runner = CliRunner()

CLEAN = "module m;\n  wire a;\nendmodule\n"
MESSY = "module m;\nwire   a;\nendmodule"


@pytest.fixture(autouse=True)
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "--check" in result.output
    assert "--in-place" in result.output


def test_cli_prints_formatted_source(workdir):
    path = workdir / "m.sv"
    path.write_text(MESSY)
    result = runner.invoke(app, [str(path)])
    assert result.exit_code == 0
    assert result.output == CLEAN
    assert path.read_text() == MESSY


def test_cli_check_clean_file(workdir):
    path = workdir / "m.sv"
    path.write_text(CLEAN)
    result = runner.invoke(app, [str(path), "--check"])
    assert result.exit_code == 0
    assert result.output == ""


def test_cli_check_unformatted_file(workdir):
    path = workdir / "m.sv"
    path.write_text(MESSY)
    result = runner.invoke(app, [str(path), "--check"])
    assert result.exit_code == 1
    assert f"needs formatting: {path}" in result.output
    assert "---" not in result.output
    assert "+++" not in result.output
    assert path.read_text() == MESSY


def test_cli_check_long_line(workdir):
    (workdir / "sv-fmt.toml").write_text("max_line_length = 8\n")
    path = workdir / "m.sv"
    path.write_text(CLEAN)
    result = runner.invoke(app, [str(path), "--check"])
    assert result.exit_code == 1
    assert f"line 1 has 9 columns (max 8) in {path}" in result.output
    assert f"line 2 has 9 columns (max 8) in {path}" in result.output
    assert "needs formatting" not in result.output


def test_cli_in_place(workdir):
    messy = workdir / "a.sv"
    messy.write_text(MESSY)
    clean = workdir / "b.sv"
    clean.write_text(CLEAN)
    result = runner.invoke(app, [str(workdir), "--in-place"])
    assert result.exit_code == 0
    assert messy.read_text() == CLEAN
    assert clean.read_text() == CLEAN


def test_cli_check_and_in_place_conflict(workdir):
    path = workdir / "m.sv"
    path.write_text(CLEAN)
    result = runner.invoke(app, [str(path), "--check", "-i"])
    assert result.exit_code == 1
    assert "--check and --in-place cannot be used together" in result.output


def test_cli_multiple_files_need_mode(workdir):
    for name in ("a.sv", "b.sv"):
        (workdir / name).write_text(CLEAN)
    result = runner.invoke(app, [str(workdir / "a.sv"), str(workdir / "b.sv")])
    assert result.exit_code == 1
    assert "formatting multiple files requires --in-place or --check" in result.output


def test_cli_no_files_found(workdir):
    (workdir / "notes.txt").write_text("hello")
    result = runner.invoke(app, [str(workdir)])
    assert result.exit_code == 1
    assert "no SystemVerilog files found to format" in result.output


def test_cli_missing_path(workdir):
    result = runner.invoke(app, [str(workdir / "gone.sv")])
    assert result.exit_code == 1
    assert "no such file or directory" in result.output


def test_cli_parse_error(workdir):
    path = workdir / "bad.sv"
    path.write_text("module m;\n  wire a\nendmodule\n")
    result = runner.invoke(app, [str(path), "--check"])
    assert result.exit_code == 1
    assert "ERROR:" in result.output
    assert "[E001]" in result.output


def test_cli_invalid_config(workdir):
    (workdir / "sv-fmt.toml").write_text("tab_size = 4\n")
    path = workdir / "m.sv"
    path.write_text(CLEAN)
    result = runner.invoke(app, [str(path)])
    assert result.exit_code == 1
    assert "tab_size" in result.output


def test_cli_explicit_config(workdir):
    config = workdir / "four.toml"
    config.write_text("indent_width = 4\n")
    path = workdir / "m.sv"
    path.write_text(CLEAN)
    result = runner.invoke(app, [str(path), "--config", str(config)])
    assert result.exit_code == 0
    assert result.output == "module m;\n    wire a;\nendmodule\n"


def test_collect_files(workdir):
    (workdir / "rtl").mkdir()
    (workdir / "rtl" / "top.SV").write_text(CLEAN)
    (workdir / "rtl" / "defs.svh").write_text(CLEAN)
    (workdir / "rtl" / "readme.md").write_text("docs")
    explicit = workdir / "rtl" / "defs.svh"

    files, problems = collect_files([workdir / "rtl", explicit])

    assert files == [workdir / "rtl" / "defs.svh", workdir / "rtl" / "top.SV"]
    assert problems == []


def test_cli_check_crlf_clean_file(workdir):
    path = workdir / "m.sv"
    path.write_bytes(CLEAN.replace("\n", "\r\n").encode())
    result = runner.invoke(app, [str(path), "--check"])
    assert result.exit_code == 0
    assert result.output == ""


def test_cli_check_parse_error_among_files(workdir):
    bad = workdir / "bad.sv"
    bad.write_text("module m;\n  wire a\nendmodule\n")
    messy = workdir / "messy.sv"
    messy.write_text(MESSY)
    clean = workdir / "clean.sv"
    clean.write_text(CLEAN)
    result = runner.invoke(app, [str(workdir), "--check"])
    assert result.exit_code == 1
    assert f"ERROR: {bad}:" in result.output
    assert f"needs formatting: {messy}" in result.output
    assert f"needs formatting: {bad}" not in result.output
    assert f"needs formatting: {clean}" not in result.output


def test_cli_in_place_parse_error_among_files(workdir):
    bad_source = "module m;\n  wire a\nendmodule\n"
    bad = workdir / "bad.sv"
    bad.write_text(bad_source)
    messy = workdir / "messy.sv"
    messy.write_text(MESSY)
    result = runner.invoke(app, [str(workdir), "-i"])
    assert result.exit_code == 1
    assert "[E001]" in result.output
    assert bad.read_text() == bad_source
    assert messy.read_text() == CLEAN
