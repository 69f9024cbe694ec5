"""Unit tests for the command-line interface."""

from __future__ import annotations

import json
from unittest.mock import patch

import httpx
import respx
from ghrest.cli import create_parser, main


class TestParser:
    """Tests for argument parsing."""

    def test_labels_arguments(self):
        args = create_parser().parse_args(["-j", "labels", "octocat", "hello", "-n", "5"])

        assert args.json is True
        assert args.command == "labels"
        assert args.limit == 5

    def test_issue_state_choices(self):
        args = create_parser().parse_args(["issues", "octocat", "hello", "--state", "closed"])

        assert args.state == "closed"


class TestMain:
    """Tests for command dispatch."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()

    def test_rate_limit(self, make_client, api: respx.MockRouter, rate_limit_body, capsys):
        api.get("/rate_limit").mock(
            return_value=httpx.Response(200, json=rate_limit_body(core_limit=60, core_remaining=45))
        )

        code = main(["rate-limit"], client=make_client())

        output = capsys.readouterr().out
        assert code == 0
        assert "45/60" in output
        assert "25% used" in output
        assert "anonymous" in output

    def test_labels_json(self, make_client, api: respx.MockRouter, sample_label_response, capsys):
        api.get("/repos/octocat/hello/labels").mock(
            return_value=httpx.Response(200, json=[sample_label_response])
        )

        code = main(["--json", "labels", "octocat", "hello"], client=make_client())

        assert code == 0
        assert json.loads(capsys.readouterr().out)[0]["name"] == "bug"

    def test_repo_not_found(self, make_client, api: respx.MockRouter, capsys):
        api.get("/repos/octocat/missing").mock(
            return_value=httpx.Response(404, json={"message": "Not Found"})
        )

        code = main(["repo", "octocat", "missing"], client=make_client())

        assert code == 1
        assert "not found" in capsys.readouterr().err

    def test_whoami_requires_auth(self, make_client, capsys):
        code = main(["whoami"], client=make_client())

        assert code == 1
        assert "Not authenticated" in capsys.readouterr().err

    def test_issues_server_error(self, make_client, api: respx.MockRouter, capsys):
        api.get("/repos/octocat/hello/issues").mock(
            return_value=httpx.Response(500, json={"message": "Server Error"})
        )

        code = main(["issues", "octocat", "hello"], client=make_client())

        assert code == 1
        assert "Server Error" in capsys.readouterr().err

    def test_login(self, make_client, api: respx.MockRouter, sample_user_response, token_store):
        api.get("/user").mock(return_value=httpx.Response(200, json=sample_user_response))
        api.post("/authorizations").mock(
            return_value=httpx.Response(201, json={"id": 1, "token": "minted"})
        )

        with patch("ghrest.cli.getpass.getpass", return_value="s3cret"):
            code = main(["login", "octocat"], client=make_client())

        assert code == 0
        assert token_store.token == "minted"
