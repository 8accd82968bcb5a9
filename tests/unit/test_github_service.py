#!/usr/bin/env python3
"""
Tests for the GitHub REST collaborator (github_service.py).

All HTTP traffic goes through a mocked requests session.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

# Ensure scripts directory is on the path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "scripts"))

from github_service import COMMENT_MARKER, GitHubService
from migration.models import FileAnalysisResult, MigrationFinding


def _response(payload=None, status_code=200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload if payload is not None else {}
    resp.text = json.dumps(payload) if payload is not None else ""
    return resp


def _session(*responses):
    session = MagicMock()
    session.headers = {}
    if len(responses) == 1:
        session.request.return_value = responses[0]
    elif responses:
        session.request.side_effect = list(responses)
    return session


def _service(session, event_name="pull_request", number=7):
    event = {"pull_request": {"number": number}} if number else {}
    return GitHubService(
        token="ghp_test",
        repository="acme/web",
        event_name=event_name,
        event=event,
        sha="abc123",
        session=session,
    )


# ============================================================================
# Construction
# ============================================================================


class TestGitHubServiceInit:
    def test_headers(self):
        session = _session()
        _service(session)
        assert session.headers["Authorization"] == "Bearer ghp_test"
        assert session.headers["Accept"] == "application/vnd.github+json"

    def test_no_token_no_auth_header(self):
        session = _session()
        GitHubService(token="", repository="acme/web", session=session)
        assert "Authorization" not in session.headers

    def test_pull_request_context(self):
        service = _service(_session())
        assert service.is_pull_request is True
        assert service.pull_number == 7

    def test_push_context(self):
        service = _service(_session(), event_name="push", number=None)
        assert service.is_pull_request is False
        assert service.pull_number is None

    def test_from_env(self, tmp_path, monkeypatch):
        event_file = tmp_path / "event.json"
        event_file.write_text(json.dumps({"pull_request": {"number": 42}}), encoding="utf-8")
        monkeypatch.setenv("GITHUB_EVENT_PATH", str(event_file))
        monkeypatch.setenv("GITHUB_REPOSITORY", "acme/web")
        monkeypatch.setenv("GITHUB_EVENT_NAME", "pull_request")
        monkeypatch.setenv("GITHUB_SHA", "deadbeef")
        monkeypatch.setenv("GITHUB_API_URL", "https://ghe.example.com/api/v3/")

        service = GitHubService.from_env("ghp_test")

        assert service.repository == "acme/web"
        assert service.pull_number == 42
        assert service.sha == "deadbeef"
        assert service.api_url == "https://ghe.example.com/api/v3"

    def test_from_env_without_event(self, monkeypatch):
        monkeypatch.delenv("GITHUB_EVENT_PATH", raising=False)
        monkeypatch.setenv("GITHUB_EVENT_NAME", "push")
        service = GitHubService.from_env("")
        assert service.event == {}
        assert service.is_pull_request is False


# ============================================================================
# Changed files
# ============================================================================


class TestGetChangedFiles:
    def test_filters_status_and_suffix(self):
        session = _session(
            _response(
                [
                    {"filename": "src/A.svelte", "status": "added"},
                    {"filename": "src/B.svelte", "status": "removed"},
                    {"filename": "src/c.ts", "status": "modified"},
                    {"filename": "src/D.svelte", "status": "modified"},
                    {"filename": "src/E.svelte", "status": "renamed"},
                ]
            )
        )
        files = _service(session).get_changed_files()

        assert files == ["src/A.svelte", "src/D.svelte"]
        method, url = session.request.call_args.args
        assert method == "GET"
        assert url == "https://api.github.com/repos/acme/web/pulls/7/files"
        assert session.request.call_args.kwargs["params"] == {"per_page": 100, "page": 1}
        assert session.request.call_args.kwargs["timeout"] == 30

    def test_paginates(self):
        first_page = [{"filename": f"src/C{i}.svelte", "status": "added"} for i in range(100)]
        second_page = [{"filename": "src/Last.svelte", "status": "modified"}]
        session = _session(_response(first_page), _response(second_page))

        files = _service(session).get_changed_files()

        assert len(files) == 101
        assert files[-1] == "src/Last.svelte"
        assert session.request.call_args.kwargs["params"]["page"] == 2

    def test_not_a_pull_request(self):
        session = _session()
        assert _service(session, event_name="push").get_changed_files() == []
        session.request.assert_not_called()

    def test_missing_pull_number(self):
        session = _session()
        assert _service(session, number=None).get_changed_files() == []
        session.request.assert_not_called()

    def test_api_error_returns_empty(self):
        session = _session(_response({"message": "Server Error"}, status_code=500))
        assert _service(session).get_changed_files() == []

    def test_transport_error_returns_empty(self):
        session = _session()
        session.request.side_effect = requests.ConnectionError("network down")
        assert _service(session).get_changed_files() == []


# ============================================================================
# PR comment
# ============================================================================


class TestCreateOrUpdateComment:
    def test_creates_comment(self):
        session = _session(_response([{"id": 1, "body": "LGTM"}]), _response({"id": 2}, status_code=201))

        _service(session).create_or_update_comment("# Results")

        post = session.request.call_args_list[1]
        assert post.args == ("POST", "https://api.github.com/repos/acme/web/issues/7/comments")
        assert post.kwargs["json"] == {"body": f"{COMMENT_MARKER}\n# Results"}

    def test_updates_marked_comment(self):
        session = _session(
            _response([{"id": 1, "body": "LGTM"}, {"id": 11, "body": f"{COMMENT_MARKER}\nold"}]),
            _response({"id": 11}),
        )

        _service(session).create_or_update_comment("# New results")

        patch_call = session.request.call_args_list[1]
        assert patch_call.args == ("PATCH", "https://api.github.com/repos/acme/web/issues/comments/11")
        assert patch_call.kwargs["json"]["body"].startswith(COMMENT_MARKER)
        assert session.request.call_count == 2

    def test_comment_with_null_body(self):
        session = _session(_response([{"id": 1, "body": None}]), _response({"id": 2}, status_code=201))
        _service(session).create_or_update_comment("# Results")
        assert session.request.call_args_list[1].args[0] == "POST"

    def test_not_a_pull_request(self):
        session = _session()
        _service(session, event_name="push").create_or_update_comment("# Results")
        session.request.assert_not_called()

    def test_failure_is_swallowed(self):
        session = _session(_response({"message": "Forbidden"}, status_code=403))
        _service(session).create_or_update_comment("# Results")
        assert session.request.call_count == 1


# ============================================================================
# Check runs and annotations
# ============================================================================


class TestCheckRun:
    @pytest.mark.parametrize(
        "errors, warnings, conclusion",
        [(2, 5, "failure"), (0, 3, "neutral"), (0, 0, "success")],
    )
    def test_conclusion(self, errors, warnings, conclusion):
        session = _session(_response({"id": 1}, status_code=201))

        _service(session).create_check_run("summary", errors, warnings)

        body = session.request.call_args.kwargs["json"]
        assert body["conclusion"] == conclusion
        assert body["status"] == "completed"
        assert body["head_sha"] == "abc123"
        assert body["name"] == "Svelte Migration Analysis"

    def test_failure_is_swallowed(self):
        session = _session()
        session.request.side_effect = requests.Timeout("slow")
        _service(session).create_check_run("summary", 1, 0)


class TestAnnotations:
    def _results(self, count):
        findings = [
            MigrationFinding(line_number=i + 1, message="msg", severity="warning", rule_id="export-let")
            for i in range(count)
        ]
        return [
            FileAnalysisResult(
                file_path="src/A.svelte",
                errors=[MigrationFinding(line_number=1, message="err", severity="error", rule_id="create-event-dispatcher")],
                warnings=findings,
            )
        ]

    def test_chunks_of_fifty(self):
        session = _session(_response({"id": 1}, status_code=201))

        _service(session).create_annotations(self._results(119))

        chunks = [c.kwargs["json"]["output"]["annotations"] for c in session.request.call_args_list]
        assert [len(c) for c in chunks] == [50, 50, 20]
        assert chunks[0][0] == {
            "path": "src/A.svelte",
            "start_line": 1,
            "end_line": 1,
            "annotation_level": "failure",
            "message": "err",
        }
        assert chunks[0][1]["annotation_level"] == "warning"
        assert all(c.kwargs["json"]["conclusion"] == "failure" for c in session.request.call_args_list)

    def test_no_findings_no_request(self):
        session = _session()
        _service(session).create_annotations([FileAnalysisResult(file_path="src/A.svelte")])
        session.request.assert_not_called()
