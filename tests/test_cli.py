"""CLI behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from skillgen.cli import _build_parser, main
from skillgen.logging import configure_logging
from tests._fixtures.repo_builder import RepoBuilder


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "generate"])
    assert args.verbose is True
    assert args.command == "generate"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["detect", "--verbose", "some/path"])
    assert args.verbose is True
    assert args.command == "detect"
    assert args.path == "some/path"


def test_cli_parses_generate_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["generate", "repo", "--dry-run", "--json", "--analyzers", "react,api", "--timeout", "2.5"]
    )
    assert args.dry_run is True
    assert args.json is True
    assert args.analyzers == "react,api"
    assert args.timeout == 2.5


def test_cli_accepts_log_file_before_or_after_command() -> None:
    parser = _build_parser()
    assert parser.parse_args(["--log-file", "run.log", "detect"]).log_file == Path("run.log")
    assert parser.parse_args(["detect", "--log-file", "run.log"]).log_file == Path("run.log")
    assert parser.parse_args(["detect"]).log_file is None


def test_cli_rejects_non_positive_timeout() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["generate", "--timeout", "0"])


def test_generate_dry_run_prints_json_report(
    repo_builder: RepoBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    repo_builder.write({"requirements.txt": "fastapi\n"})

    main(["generate", str(repo_builder.path()), "--dry-run", "--json", "--analyzers", "api,testing"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["dry_run"] is True
    assert payload["persisted"] == []
    assert [entry["name"] for entry in payload["analyzers"]] == ["api", "testing"]
    assert payload["tech_stack"]["frameworks"] == ["FastAPI"]
    assert not (repo_builder.path() / ".claude").exists()


def test_generate_writes_skills(
    repo_builder: RepoBuilder, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    output = tmp_path / "skills"

    main(["generate", str(repo_builder.path()), "--output", str(output), "--analyzers", "devops"])

    out = capsys.readouterr().out
    assert "Generated 1 skill(s)" in out
    assert (output / "devops" / "devops-best-practices" / "SKILL.md").is_file()


def test_generate_missing_path_exits_with_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["generate", str(tmp_path / "missing")])
    assert excinfo.value.code == 1


def test_generate_unknown_analyzer_exits_with_error(repo_builder: RepoBuilder) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["generate", str(repo_builder.path()), "--analyzers", "nope"])
    assert excinfo.value.code == 1


def test_detect_prints_stack(repo_builder: RepoBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    repo_builder.write({"go.mod": "module example.com/app\n"})

    main(["detect", str(repo_builder.path())])

    stack = json.loads(capsys.readouterr().out)
    assert stack["languages"] == ["Go"]
    assert stack["has_go"] is True


def test_generate_writes_log_file(repo_builder: RepoBuilder, tmp_path: Path) -> None:
    log_file = tmp_path / "skillgen.log"

    main(["generate", str(repo_builder.path()), "--dry-run", "--log-file", str(log_file)])
    configure_logging()

    text = log_file.read_text(encoding="utf-8")
    assert "INFO skillgen.orchestrator: Starting skill generation" in text
    assert "Dry run: skipping persistence" in text
