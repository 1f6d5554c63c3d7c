"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from portfolio_updater import cli
from portfolio_updater.cli import _build_parser
from portfolio_updater.git.publisher import CommitResult
from portfolio_updater.orchestrator import SetupOutcome, UpdateOutcome
from tests._fixtures.content import valid_document


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "setup"])
    assert args.verbose is True
    assert args.command == "setup"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["chat", "Update hero", "--verbose"])
    assert args.verbose is True
    assert args.command == "chat"
    assert args.prompt == "Update hero"


def test_cli_serve_defaults() -> None:
    args = _build_parser().parse_args(["serve"])
    assert args.host == "0.0.0.0"
    assert args.port == 8000
    assert args.verbose is False


def test_cli_accepts_config_path() -> None:
    args = _build_parser().parse_args(["--config", "site.yml", "serve", "--port", "9000"])
    assert args.config == Path("site.yml")
    assert args.port == 9000


def test_cli_requires_command() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args([])


def test_validate_prints_canonical_document(tmp_path: Path, capsys) -> None:
    path = tmp_path / "content.json"
    document = valid_document()
    document["extra"] = "dropped"
    path.write_text(json.dumps(document), encoding="utf-8")

    cli.main(["validate", str(path)])

    output = capsys.readouterr().out
    assert json.loads(output) == valid_document()
    assert output.startswith('{\n  "personal_brand"')


def test_validate_reports_schema_violation(tmp_path: Path, capsys) -> None:
    path = tmp_path / "content.json"
    document = valid_document()
    document["social_proof"]["google_reviews"][0]["stars"] = 0
    path.write_text(json.dumps(document), encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["validate", str(path)])

    assert excinfo.value.code == 1
    assert "stars must be an integer between 1 and 5" in capsys.readouterr().err


def test_validate_reports_unreadable_file(tmp_path: Path, capsys) -> None:
    path = tmp_path / "content.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["validate", str(path)])

    assert excinfo.value.code == 1
    assert "Unable to read" in capsys.readouterr().err


class _FakeOrchestrator:
    def __init__(self, config) -> None:
        self.config = config

    def run_update(self, prompt: str) -> UpdateOutcome:
        return UpdateOutcome(
            repository="owner/repo",
            branch="main",
            commit=CommitResult(sha="abc", url="https://github.com/owner/repo/commit/abc"),
        )

    def run_setup(self, provided_key):
        return SetupOutcome(repository="owner/repo", branch="main")


def test_chat_command_prints_commit(monkeypatch, tmp_path: Path, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "ContentOrchestrator", _FakeOrchestrator)

    cli.main(["chat", "Update hero"])

    output = capsys.readouterr().out.splitlines()
    assert output == [
        "Committed content.json to owner/repo@main",
        "https://github.com/owner/repo/commit/abc",
    ]


def test_setup_command_reports_completed(monkeypatch, tmp_path: Path, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "ContentOrchestrator", _FakeOrchestrator)

    cli.main(["setup"])

    assert "Setup already completed" in capsys.readouterr().out


def test_chat_command_reports_failure(monkeypatch, tmp_path: Path, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    for key in ("LLM_API_KEY", "GITHUB_PAT", "GITHUB_OWNER", "GITHUB_REPO"):
        monkeypatch.delenv(key, raising=False)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["chat", "Update hero"])

    assert excinfo.value.code == 1
    assert "Missing required secret: LLM_API_KEY" in capsys.readouterr().err
