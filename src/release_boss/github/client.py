"""Minimal GitHub REST API client.

Only the endpoints the release workflow needs: comparing refs, reading
tags and releases, managing branches, files, pull requests and tags.
Responses are returned as decoded JSON; callers pick out what they need.
"""

from __future__ import annotations

import base64
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from release_boss.core.commits import CommitRecord
from release_boss.exceptions import GitHubAuthError, GitHubError, GitHubNotFoundError
from release_boss.logging import get_logger

log = get_logger(__name__)

USER_AGENT = "release-boss"
PER_PAGE = 100


class GitHubClient:
    """REST client bound to a single repository."""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        *,
        api_url: str = "https://api.github.com",
        timeout_s: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not token:
            raise GitHubAuthError("A GitHub token is required (GITHUB_TOKEN or the 'token' input)")
        self.owner = owner
        self.repo = repo
        self.base_url = f"{api_url.rstrip('/')}/repos/{owner}/{repo}"
        self.timeout_s = timeout_s

        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": USER_AGENT,
            }
        )
        if session is None:
            retry = Retry(
                total=3,
                status_forcelist=[429, 500, 502, 503, 504],
                backoff_factor=1,
                allowed_methods=["HEAD", "GET", "OPTIONS"],
            )
            self.session.mount("https://", HTTPAdapter(max_retries=retry))

    # -- plumbing -----------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:  # noqa: ANN401
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout_s, **kwargs)
        except requests.RequestException as e:
            raise GitHubError(f"{method} {path} failed: {e}") from e

        if resp.status_code in (401, 403):
            raise GitHubAuthError(f"{method} {path}: access denied", status=resp.status_code)
        if resp.status_code == 404:
            raise GitHubNotFoundError(f"{method} {path}: not found", status=404)
        if resp.status_code >= 400:
            raise GitHubError(
                f"{method} {path} failed with HTTP {resp.status_code}: {resp.text[:200]}",
                status=resp.status_code,
            )
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    def _get(self, path: str, **params: Any) -> Any:  # noqa: ANN401
        return self._request("GET", path, params=params or None)

    # -- commits, tags, releases --------------------------------------------

    def compare_commits(self, base: str, head: str) -> list[CommitRecord]:
        """Commits in ``base...head`` as parsed records, oldest first."""
        data = self._get(f"/compare/{base}...{head}", per_page=PER_PAGE)
        commits = []
        for item in data.get("commits") or []:
            author = (item.get("author") or {}).get("login")
            commits.append(
                CommitRecord.from_message(
                    item["sha"],
                    item["commit"]["message"],
                    author=author,
                    url=item.get("html_url"),
                )
            )
        log.info("compared refs", base=base, head=head, commits=len(commits))
        return commits

    def list_tags(self) -> list[str]:
        return [t["name"] for t in self._get("/tags", per_page=PER_PAGE) or []]

    def get_latest_release_tag(self) -> str | None:
        try:
            data = self._get("/releases/latest")
        except GitHubNotFoundError:
            return None
        return data.get("tag_name") or None

    def list_issue_comments(self, number: int) -> list[dict[str, Any]]:
        return self._get(f"/issues/{number}/comments", per_page=PER_PAGE) or []

    # -- refs ---------------------------------------------------------------

    def get_ref(self, ref: str) -> str | None:
        """SHA a ref (``heads/main``, ``tags/v1.0.0``) points at, or None."""
        try:
            data = self._get(f"/git/ref/{ref}")
        except GitHubNotFoundError:
            return None
        return data["object"]["sha"]

    def get_branch_sha(self, branch: str) -> str:
        sha = self.get_ref(f"heads/{branch}")
        if sha is None:
            raise GitHubNotFoundError(f"Branch {branch} does not exist", status=404)
        return sha

    def create_ref(self, ref: str, sha: str) -> None:
        self._request("POST", "/git/refs", json={"ref": f"refs/{ref}", "sha": sha})

    def update_ref(self, ref: str, sha: str, *, force: bool = False) -> None:
        self._request("PATCH", f"/git/refs/{ref}", json={"sha": sha, "force": force})

    def delete_ref(self, ref: str) -> None:
        self._request("DELETE", f"/git/refs/{ref}")

    def merge(self, base: str, head: str, message: str) -> str | None:
        """Merge ``head`` into branch ``base``.

        Returns:
            SHA of the merge commit, or None if there was nothing to merge

        Raises:
            GitHubError: With status 409 on a merge conflict
        """
        data = self._request(
            "POST", "/merges", json={"base": base, "head": head, "commit_message": message}
        )
        return data["sha"] if data else None

    # -- contents -----------------------------------------------------------

    def get_file(self, path: str, ref: str) -> tuple[str, str] | None:
        """Decoded content and blob SHA of a file at ``ref``, or None."""
        try:
            data = self._get(f"/contents/{path}", ref=ref)
        except GitHubNotFoundError:
            return None
        content = base64.b64decode(data.get("content", "")).decode("utf-8")
        return content, data["sha"]

    def put_file(self, path: str, content: str, message: str, branch: str) -> None:
        """Create or update a file on a branch with one commit."""
        existing = self.get_file(path, branch)
        body: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": branch,
        }
        if existing is not None:
            if existing[0] == content:
                log.debug("file unchanged, not committing", path=path, branch=branch)
                return
            body["sha"] = existing[1]
        self._request("PUT", f"/contents/{path}", json=body)

    def list_tree(self, sha: str) -> list[str]:
        data = self._get(f"/git/trees/{sha}", recursive=1)
        return [e["path"] for e in data.get("tree", []) if e.get("type") == "blob"]

    # -- pull requests ------------------------------------------------------

    def find_open_pull(self, head: str, base: str) -> dict[str, Any] | None:
        pulls = self._get(
            "/pulls", state="open", head=f"{self.owner}:{head}", base=base, per_page=PER_PAGE
        )
        return pulls[0] if pulls else None

    def create_pull(self, title: str, body: str, head: str, base: str) -> dict[str, Any]:
        return self._request(
            "POST", "/pulls", json={"title": title, "body": body, "head": head, "base": base}
        )

    def update_pull(self, number: int, **fields: Any) -> dict[str, Any]:  # noqa: ANN401
        return self._request("PATCH", f"/pulls/{number}", json=fields)
