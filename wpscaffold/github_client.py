"""
github_client.py

Responsibility: Isolate all direct GitHub REST API interaction.

This module must be the only place that:
- Constructs GitHub REST endpoints
- Sends HTTP requests to api.github.com
- Interprets GitHub API responses / error payloads (including 404/409 as "not ready yet")

Everything else (prompts, git commands, replacements) should use this client.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

import requests

from wpscaffold import __version__

logger = logging.getLogger(__name__)

# Seconds between readiness checks; the last value repeats for further attempts.
RETRY_DELAYS: tuple[float, ...] = (0.5, 1, 1, 2, 3, 4, 5)

# Template application is asynchronous on GitHub's side; these mean "try again".
NOT_READY_STATUSES = frozenset({404, 409})


class GitHubError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class RepoInfo:
    owner: str
    name: str
    html_url: str
    clone_url: str
    ssh_url: str
    default_branch: str
    ready: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class PullRequestRef:
    repo: str
    number: int
    title: str

    @property
    def url(self) -> str:
        return f"https://github.com/{self.repo}/pull/{self.number}"

    def __str__(self) -> str:
        return f"{self.repo}#{self.number}"


@dataclass(frozen=True)
class FileContent:
    sha: str
    content: str  # base64, newlines stripped


def retry_delay(attempt: int) -> float:
    return RETRY_DELAYS[min(len(RETRY_DELAYS) - 1, attempt)]


def _repo_info(data: dict[str, Any]) -> RepoInfo:
    return RepoInfo(
        owner=data["owner"]["login"],
        name=data["name"],
        html_url=data["html_url"],
        clone_url=data["clone_url"],
        ssh_url=data["ssh_url"],
        default_branch=data.get("default_branch") or "main",
    )


class GitHubClient:
    def __init__(
        self,
        token: str,
        api_base: str = "https://api.github.com",
        *,
        http: Any = None,
    ) -> None:
        if not token.strip():
            raise GitHubError("GitHub token is required.")
        self._token = token
        self._api_base = api_base.rstrip("/")
        # Anything with a requests-compatible `.request()`; a Session or the module itself.
        self._http = http if http is not None else requests

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": f"wpscaffold/{__version__}",
        }

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self._api_base}{path}"
        logger.debug("%s %s", method, path)
        r = self._http.request(method, url, headers=self._headers(), params=params, json=json_body, timeout=30)
        if r.status_code >= 400:
            try:
                payload = r.json()
            except Exception:
                payload = {"message": r.text}
            message = payload.get("message", payload) if isinstance(payload, dict) else payload
            raise GitHubError(f"GitHub API error {r.status_code} {method} {path}: {message}", r.status_code)
        if r.status_code == 204:
            return None
        return r.json()

    # Repositories

    def get_repo(self, owner: str, name: str) -> RepoInfo | None:
        """
        Return RepoInfo if the repo exists and is accessible; otherwise None.
        """
        try:
            data = self._request("GET", f"/repos/{owner}/{name}")
        except GitHubError as e:
            if e.status_code == 404:
                return None
            raise
        return _repo_info(data)

    def has_repository(self, owner: str, name: str) -> bool:
        return self.get_repo(owner, name) is not None

    def create_repo_from_template(
        self,
        *,
        template: str,
        owner: str,
        name: str,
        private: bool,
        description: str = "",
    ) -> RepoInfo:
        """
        Create `owner/name` from the `template` repository ("owner/name").

        The returned handle is not ready: GitHub copies the template contents
        asynchronously, so callers must `wait_until_ready` before cloning.
        """
        template_owner, template_name = template.split("/", 1)
        body = {
            "owner": owner,
            "name": name,
            "private": private,
            "description": description,
            "include_all_branches": False,
        }
        data = self._request("POST", f"/repos/{template_owner}/{template_name}/generate", json_body=body)
        return _repo_info(data)

    def count_commits(self, owner: str, name: str) -> int:
        """Number of commits on the first page (0 or 1)."""
        commits = self._request("GET", f"/repos/{owner}/{name}/commits", params={"per_page": 1})
        return len(commits or [])

    def wait_until_ready(
        self,
        owner: str,
        name: str,
        *,
        sleep: Callable[[float], None] = time.sleep,
        max_attempts: int | None = None,
    ) -> bool:
        """
        Block until the repository has at least one commit.

        404 and 409 answers are treated like an empty repository and retried
        after `retry_delay(attempt)`. Any other API error propagates.
        Without `max_attempts` there is no upper bound on the wait.
        """
        attempt = 0
        while max_attempts is None or attempt < max_attempts:
            delay = retry_delay(attempt)
            try:
                if self.count_commits(owner, name) > 0:
                    return True
            except GitHubError as e:
                if e.status_code not in NOT_READY_STATUSES:
                    raise
                logger.debug("%s/%s not ready yet (%s)", owner, name, e.status_code)
            attempt += 1
            if max_attempts is not None and attempt >= max_attempts:
                break
            sleep(delay)
        raise GitHubError(f"Repository {owner}/{name} not ready after {attempt} attempts.")

    def mark_ready(self, repo: RepoInfo, **kwargs: Any) -> RepoInfo:
        """Wait for `repo` and flip its `ready` flag."""
        self.wait_until_ready(repo.owner, repo.name, **kwargs)
        repo.ready = True
        return repo

    def replace_topics(self, owner: str, name: str, topics: list[str]) -> list[str]:
        data = self._request("PUT", f"/repos/{owner}/{name}/topics", json_body={"names": topics})
        return list(data.get("names", []))

    # Search

    def search_pull_requests(self, query: str) -> list[PullRequestRef]:
        data = self._request("GET", "/search/issues", params={"q": f"is:pr {query}"})
        prefix = f"{self._api_base}/repos/"
        return [
            PullRequestRef(
                repo=item["repository_url"].replace(prefix, ""),
                number=int(item["number"]),
                title=item.get("title", ""),
            )
            for item in data.get("items", [])
        ]

    def search_repositories(self, query: str) -> list[str]:
        data = self._request("GET", "/search/repositories", params={"q": query})
        return sorted(item["name"] for item in data.get("items", []))

    # Contents

    def get_file(self, owner: str, name: str, path: str, *, ref: str) -> FileContent | None:
        try:
            data = self._request("GET", f"/repos/{owner}/{name}/contents/{path}", params={"ref": ref})
        except GitHubError as e:
            if e.status_code == 404:
                return None
            raise
        return FileContent(sha=data["sha"], content=str(data.get("content", "")).replace("\n", ""))

    def put_file(
        self,
        owner: str,
        name: str,
        path: str,
        *,
        content: str,
        message: str,
        branch: str,
        sha: str | None = None,
    ) -> str:
        """Create or update a file (`content` is base64). Returns the commit URL."""
        body: dict[str, Any] = {"message": message, "content": content, "branch": branch}
        if sha:
            body["sha"] = sha
        data = self._request("PUT", f"/repos/{owner}/{name}/contents/{path}", json_body=body)
        return str(data["commit"]["html_url"])
