#!/usr/bin/env python3
"""
GitHub Pull Request Integration
Reads the Actions event context and talks to the GitHub REST API:

- list changed component files in the pull request
- create or update the analysis comment on the pull request
- publish a check run (optionally carrying line annotations)

Platform failures are logged and swallowed at this boundary so a comment
that cannot be posted never changes the analysis outcome.
"""

import json
import logging
import os
from typing import Any, Optional

import requests

from exceptions import GitHubAPIError
from migration.models import SEVERITY_ERROR, FileAnalysisResult

logger = logging.getLogger(__name__)

COMMENT_MARKER = "<!-- svelte-migration-analysis -->"
CHECK_RUN_NAME = "Svelte Migration Analysis"
MAX_ANNOTATIONS_PER_REQUEST = 50
REQUEST_TIMEOUT = 30


def _chunk(items: list, size: int) -> list[list]:
    return [items[i:i + size] for i in range(0, len(items), size)]


class GitHubService:
    """Thin wrapper over the GitHub REST API for one workflow run"""

    def __init__(
        self,
        token: str,
        repository: str,
        event_name: str = "",
        event: Optional[dict] = None,
        sha: str = "",
        api_url: str = "https://api.github.com",
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            token: GitHub token with pull-request and checks scope
            repository: ``owner/repo``
            event_name: Workflow trigger (``pull_request``, ``push``...)
            event: Parsed webhook payload of the trigger
            sha: Commit the check run attaches to
            api_url: REST API base URL (GitHub Enterprise support)
            session: Pre-built session, mainly for tests
        """
        self.repository = repository
        self.event_name = event_name
        self.event = event or {}
        self.sha = sha
        self.api_url = api_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    @classmethod
    def from_env(cls, token: str) -> "GitHubService":
        """Build from the environment variables set by GitHub Actions"""
        event = {}
        event_path = os.environ.get("GITHUB_EVENT_PATH")
        if event_path and os.path.isfile(event_path):
            try:
                with open(event_path, encoding="utf-8") as f:
                    event = json.load(f)
            except (OSError, ValueError) as e:
                logger.warning(f"⚠️  Could not read event payload {event_path}: {e}")

        return cls(
            token=token,
            repository=os.environ.get("GITHUB_REPOSITORY", ""),
            event_name=os.environ.get("GITHUB_EVENT_NAME", ""),
            event=event,
            sha=os.environ.get("GITHUB_SHA", ""),
            api_url=os.environ.get("GITHUB_API_URL", "https://api.github.com"),
        )

    @property
    def is_pull_request(self) -> bool:
        return self.event_name == "pull_request"

    @property
    def pull_number(self) -> Optional[int]:
        return (self.event.get("pull_request") or {}).get("number")

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        """Send one API request

        Raises:
            GitHubAPIError: On transport failure or a non-2xx response
        """
        url = f"{self.api_url}/repos/{self.repository}{path}"
        try:
            resp = self.session.request(method, url, timeout=REQUEST_TIMEOUT, **kwargs)
        except requests.RequestException as e:
            raise GitHubAPIError(f"{method} {path} failed: {e}") from e

        if resp.status_code >= 400:
            raise GitHubAPIError(f"{method} {path} returned {resp.status_code}: {resp.text[:200]}")
        return resp

    def get_changed_files(self, suffix: str = ".svelte") -> list[str]:
        """Return added or modified files in the pull request ending in *suffix*

        Returns an empty list outside pull requests or when the API fails.
        """
        if not self.is_pull_request:
            return []

        if not self.pull_number:
            logger.warning("⚠️  No pull request number found")
            return []

        changed = []
        page = 1
        try:
            while True:
                resp = self._request(
                    "GET",
                    f"/pulls/{self.pull_number}/files",
                    params={"per_page": 100, "page": page},
                )
                files = resp.json()
                for item in files:
                    if item.get("status") in ("added", "modified") and item.get("filename", "").endswith(suffix):
                        changed.append(item["filename"])
                if len(files) < 100:
                    break
                page += 1
        except GitHubAPIError as e:
            logger.warning(f"⚠️  Failed to get changed files: {e}")
            return []

        logger.info(f"Found {len(changed)} changed Svelte files in PR")
        return changed

    def create_or_update_comment(self, summary: str) -> None:
        """Post the summary on the pull request, replacing an earlier analysis comment"""
        if not self.is_pull_request:
            logger.info("Not a pull request, skipping comment creation")
            return

        if not self.pull_number:
            logger.warning("⚠️  No pull request number found, cannot create comment")
            return

        body = f"{COMMENT_MARKER}\n{summary}"
        try:
            resp = self._request("GET", f"/issues/{self.pull_number}/comments", params={"per_page": 100})
            existing = next(
                (c for c in resp.json() if COMMENT_MARKER in (c.get("body") or "")),
                None,
            )

            if existing:
                self._request("PATCH", f"/issues/comments/{existing['id']}", json={"body": body})
                logger.info("Updated existing PR comment with analysis results")
            else:
                self._request("POST", f"/issues/{self.pull_number}/comments", json={"body": body})
                logger.info("Created new PR comment with analysis results")
        except GitHubAPIError as e:
            logger.warning(f"⚠️  Failed to create/update PR comment: {e}")

    def create_check_run(self, summary: str, errors: int, warnings: int, name: str = CHECK_RUN_NAME) -> None:
        """Publish a completed check run reflecting the totals"""
        if errors > 0:
            conclusion = "failure"
            title = f"Found {errors} migration issues"
        elif warnings > 0:
            conclusion = "neutral"
            title = f"Found {warnings} migration warnings"
        else:
            conclusion = "success"
            title = "No migration issues found"

        try:
            self._request(
                "POST",
                "/check-runs",
                json={
                    "name": name,
                    "head_sha": self.sha,
                    "status": "completed",
                    "conclusion": conclusion,
                    "output": {"title": title, "summary": summary, "text": summary},
                },
            )
            logger.info(f"Created check run with conclusion: {conclusion}")
        except GitHubAPIError as e:
            logger.warning(f"⚠️  Failed to create check run: {e}")

    def create_annotations(self, results: list[FileAnalysisResult]) -> None:
        """Attach every finding as a line annotation, 50 per check-run request"""
        annotations = [
            {
                "path": result.file_path,
                "start_line": finding.line_number,
                "end_line": finding.line_number,
                "annotation_level": "failure" if finding.severity == SEVERITY_ERROR else "warning",
                "message": finding.message,
            }
            for result in results
            for finding in result.findings
        ]
        if not annotations:
            return

        has_errors = any(a["annotation_level"] == "failure" for a in annotations)
        try:
            for chunk in _chunk(annotations, MAX_ANNOTATIONS_PER_REQUEST):
                self._request(
                    "POST",
                    "/check-runs",
                    json={
                        "name": CHECK_RUN_NAME,
                        "head_sha": self.sha,
                        "status": "completed",
                        "conclusion": "failure" if has_errors else "neutral",
                        "output": {
                            "title": CHECK_RUN_NAME,
                            "summary": f"Found {len(annotations)} migration issues",
                            "annotations": chunk,
                        },
                    },
                )
            logger.info(f"Created annotations for {len(annotations)} issues")
        except GitHubAPIError as e:
            logger.warning(f"⚠️  Failed to create annotations: {e}")


__all__ = ["COMMENT_MARKER", "CHECK_RUN_NAME", "GitHubService"]
