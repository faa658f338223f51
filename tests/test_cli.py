"""Tests for the CLI module."""

from __future__ import annotations

import re
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from contrib_stats.cli import main
from contrib_stats.config import Config
from contrib_stats.errors import RetrievalError
from contrib_stats.models import IssueResult, Repository

BASE_ARGS = ["--env-file", "does-not-exist.env", "--host", "https://ghe.example.com", "--org", "acme", "--token", "t"]


@pytest.fixture
def runner():
    return CliRunner(env={"GITHUB_HOST": "", "DEFAULT_ORG": "", "API_KEY": "", "GITHUB_TOKEN": ""})


def test_main_version(runner):
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


@patch("contrib_stats.cli.asyncio.run")
@patch("contrib_stats.cli.run")
def test_authors_passes_options(mock_run, mock_asyncio_run, runner):
    result = runner.invoke(main, [
        *BASE_ARGS,
        "authors",
        "--match", "^project_team",
        "--since", "2019-10-08",
        "--until", "October 29 2019",
        "--file-match", r"\.ts$",
        "--sort-by", "additions",
        "--min-commits", "5",
        "--exclude-repo", "repo1",
        "--format", "json",
        "--max-concurrency", "4",
    ])
    assert result.exit_code == 0, result.output
    mock_asyncio_run.assert_called_once()
    config = mock_run.call_args.args[0]
    assert config == Config(host="https://ghe.example.com", default_org="acme", token="t")
    kwargs = mock_run.call_args.kwargs
    assert kwargs["match"] == "^project_team"
    assert kwargs["since"] == "2019-10-08"
    assert kwargs["until"] == "October 29 2019"
    assert kwargs["file_match"] == r"\.ts$"
    assert kwargs["sort_by"] == "additions"
    assert kwargs["min_commits"] == 5
    assert kwargs["exclude_repos"] == ["repo1"]
    assert kwargs["output_format"] == "json"
    assert kwargs["max_concurrency"] == 4


@patch("contrib_stats.cli.asyncio.run")
@patch("contrib_stats.cli.run")
def test_authors_resolves_relative_dates(mock_run, mock_asyncio_run, runner):
    result = runner.invoke(main, [*BASE_ARGS, "authors", "--since", "7d"])
    assert result.exit_code == 0, result.output
    since = mock_run.call_args.kwargs["since"]
    assert since is not None and len(since) == 10 and since.count("-") == 2


def test_authors_rejects_unknown_sort(runner):
    result = runner.invoke(main, [*BASE_ARGS, "authors", "--sort-by", "stars"])
    assert result.exit_code != 0


@patch("contrib_stats.cli.asyncio.run")
def test_retrieval_error_becomes_click_error(mock_asyncio_run, runner):
    def fail(coro):
        coro.close()
        raise RetrievalError("/orgs/acme/repos")

    mock_asyncio_run.side_effect = fail
    result = runner.invoke(main, [*BASE_ARGS, "repos"])
    assert result.exit_code == 1
    assert "Failed to retrieve data from /orgs/acme/repos" in result.output


@patch("contrib_stats.cli.GitHubClient")
def test_repos_lists_matches(mock_client_cls, runner):
    client = AsyncMock()
    client.list_repos.return_value = [Repository(name="project_team1", url="u", full_name="acme/project_team1")]
    mock_client_cls.return_value.__aenter__ = AsyncMock(return_value=client)
    mock_client_cls.return_value.__aexit__ = AsyncMock(return_value=False)

    result = runner.invoke(main, [*BASE_ARGS, "repos", "--match", "^project"])

    assert result.exit_code == 0, result.output
    assert "project_team1" in result.output
    client.list_repos.assert_awaited_once_with("^project")


@patch("contrib_stats.cli.run_export")
@patch("contrib_stats.cli.asyncio.run")
def test_commits_export(mock_asyncio_run, mock_export, runner, tmp_path):
    mock_asyncio_run.side_effect = lambda coro: ["a.csv", "b.csv"]
    result = runner.invoke(main, [*BASE_ARGS, "commits", "--output-dir", str(tmp_path), "--match", "^team"])
    assert result.exit_code == 0, result.output
    assert "Wrote 2 file(s)" in result.output
    assert mock_export.call_args.args[1] == str(tmp_path)
    assert mock_export.call_args.kwargs["match"] == "^team"


def test_activity_rejects_bad_repo(runner):
    result = runner.invoke(main, [*BASE_ARGS, "activity", "not-a-full-name"])
    assert result.exit_code == 2


@patch("contrib_stats.cli.GitHubClient")
def test_create_issue_success(mock_client_cls, runner):
    client = AsyncMock()
    client.submit_issue.return_value = IssueResult(ok=True)
    mock_client_cls.return_value.__aenter__ = AsyncMock(return_value=client)
    mock_client_cls.return_value.__aexit__ = AsyncMock(return_value=False)

    result = runner.invoke(main, [
        *BASE_ARGS, "create-issue", "acme/app", "--title", "Bug", "--label", "bug", "--assignee", "alice",
    ])

    assert result.exit_code == 0, result.output
    repo, issue = client.submit_issue.await_args.args
    assert repo.full_name == "acme/app"
    assert issue.to_payload() == {"title": "Bug", "body": "", "assignees": ["alice"], "labels": ["bug"]}


@patch("contrib_stats.cli.GitHubClient")
def test_create_issue_failure_exits_non_zero(mock_client_cls, runner):
    client = AsyncMock()
    client.submit_issue.return_value = IssueResult(ok=False, error="HTTP 422")
    mock_client_cls.return_value.__aenter__ = AsyncMock(return_value=client)
    mock_client_cls.return_value.__aexit__ = AsyncMock(return_value=False)

    result = runner.invoke(main, [*BASE_ARGS, "create-issue", "acme/app", "--title", "Bug"])

    assert result.exit_code == 1
    assert "HTTP 422" in result.output


@patch("contrib_stats.cli.GitHubClient")
def test_invalid_pattern_becomes_click_error(mock_client_cls, runner):
    client = AsyncMock()
    client.list_repos.side_effect = lambda match: re.compile(match)
    mock_client_cls.return_value.__aenter__ = AsyncMock(return_value=client)
    mock_client_cls.return_value.__aexit__ = AsyncMock(return_value=False)

    result = runner.invoke(main, [*BASE_ARGS, "repos", "--match", "("])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert not isinstance(result.exception, re.error)
