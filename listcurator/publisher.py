"""Publish generated markdown to a GitHub repository via the REST contents API."""

from __future__ import annotations

import base64
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import quote

import httpx

from .errors import PublishError
from .models.config import Folder
from .models.results import PublishResult

log = logging.getLogger(__name__)

API_URL = "https://api.github.com"
RATE_LIMIT_BUFFER = 100
RESOURCE_FILE_RE = re.compile(r"^resources-(\d{3,})\.md$")

ERROR_MESSAGES = {
    401: "GitHub authentication failed - check your token",
    403: "No permission to access repository",
    404: "Repository not found",
    422: "Invalid file content or path",
    429: "GitHub API rate limit exceeded",
}


def resource_file_name(number: int) -> str:
    return f"resources-{number:03d}.md"


@dataclass
class RateLimitStatus:
    remaining: int
    reset_at: datetime
    limited: bool
    limit: int = 0
    used: int = 0


class GitHubPublisher:
    """Numbered ``resources-NNN.md`` files per folder, plus a README index."""

    def __init__(
        self,
        token: str,
        repo: str,
        branch: str = "main",
        committer: dict[str, str] | None = None,
        client: httpx.Client | None = None,
        rate_limit_buffer: int = RATE_LIMIT_BUFFER,
    ):
        if "/" not in repo:
            raise PublishError(f"Repository must look like owner/name, got {repo!r}")
        self.repo = repo
        self.branch = branch
        self.committer = committer
        self.rate_limit_buffer = rate_limit_buffer
        self.client = client or httpx.Client(base_url=API_URL, timeout=30)
        self.client.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )

    # -- low level ----------------------------------------------------------

    def _contents_url(self, path: str) -> str:
        return f"/repos/{self.repo}/contents/{quote(path)}"

    def _get_contents(self, path: str) -> Any:
        response = self.client.get(self._contents_url(path), params={"ref": self.branch})
        response.raise_for_status()
        return response.json()

    def file_url(self, path: str) -> str:
        return f"https://github.com/{self.repo}/blob/{self.branch}/{quote(path)}"

    def put_file(self, path: str, content: str, message: str, sha: str | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": self.branch,
        }
        if sha:
            payload["sha"] = sha
        if self.committer:
            payload["committer"] = self.committer
        response = self.client.put(self._contents_url(path), json=payload)
        response.raise_for_status()
        return response.json()

    # -- repository checks --------------------------------------------------

    def ensure_folder(self, folder: str) -> bool:
        """Create ``folder/.gitkeep`` when the folder is missing. Returns True if created."""
        try:
            self._get_contents(folder)
            return False
        except httpx.HTTPStatusError as e:
            if e.response.status_code != 404:
                raise
        try:
            self.put_file(f"{folder}/.gitkeep", "", f"Create {folder} folder")
        except httpx.HTTPError as e:
            raise PublishError(f"Failed to create folder {folder}: {e}") from e
        log.info("Created folder %s", folder)
        return True

    def list_resource_numbers(self, folder: str) -> list[int]:
        try:
            entries = self._get_contents(folder)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return []
            raise
        numbers = []
        for entry in entries if isinstance(entries, list) else []:
            match = RESOURCE_FILE_RE.match(entry.get("name", ""))
            if match:
                numbers.append(int(match.group(1)))
        return sorted(numbers)

    def next_file_number(self, folder: str) -> int:
        numbers = self.list_resource_numbers(folder)
        return max(numbers) + 1 if numbers else 1

    def check_rate_limit(self) -> RateLimitStatus:
        """Remaining core quota. Any failure reads as limited for the next hour."""
        try:
            response = self.client.get("/rate_limit")
            response.raise_for_status()
            rate = response.json()["rate"]
        except (httpx.HTTPError, KeyError, ValueError) as e:
            log.warning("Failed to check GitHub rate limit: %s", e)
            return RateLimitStatus(
                remaining=0,
                reset_at=datetime.now(timezone.utc) + timedelta(hours=1),
                limited=True,
            )
        remaining = int(rate.get("remaining", 0))
        return RateLimitStatus(
            remaining=remaining,
            reset_at=datetime.fromtimestamp(int(rate.get("reset", 0)), tz=timezone.utc),
            limited=remaining < self.rate_limit_buffer,
            limit=int(rate.get("limit", 0)),
            used=int(rate.get("used", 0)),
        )

    def check_repo_access(self) -> dict[str, Any]:
        try:
            response = self.client.get(f"/repos/{self.repo}")
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise PublishError(f"Repository {self.repo} not found", status=404) from e
            if status == 403:
                raise PublishError(f"No access to repository {self.repo}", status=403) from e
            raise

        data = response.json()
        if data.get("archived"):
            raise PublishError(f"Repository {self.repo} is archived", status=403)
        if data.get("disabled"):
            raise PublishError(f"Repository {self.repo} is disabled", status=403)
        if not data.get("permissions", {}).get("push"):
            raise PublishError(f"No write access to repository {self.repo}", status=403)
        return data

    # -- publishing ---------------------------------------------------------

    def publish_markdown(self, folder: str, content: str) -> PublishResult:
        """Upload ``content`` as the next numbered file in ``folder``. Never raises."""
        path = ""
        try:
            self.ensure_folder(folder)
            number = self.next_file_number(folder)
            path = f"{folder}/{resource_file_name(number)}"

            rate = self.check_rate_limit()
            if rate.limited:
                raise PublishError(f"Rate limit exceeded. Resets at {rate.reset_at.isoformat()}", status=429)

            self.check_repo_access()
            self.put_file(path, content, f"Add resource collection #{number}")
        except PublishError as e:
            log.error("Publish to %s failed: %s", folder, e)
            return PublishResult(success=False, path=path, message=str(e), status=e.status)
        except httpx.HTTPStatusError as e:
            return self._error_result(e, path)
        except httpx.HTTPError as e:
            log.error("GitHub request failed: %s", e)
            return PublishResult(success=False, path=path, message=f"GitHub request failed: {e}")

        url = self.file_url(path)
        log.info("Published %s", url)
        return PublishResult(success=True, url=url, number=number, path=path, message="File uploaded successfully")

    def _error_result(self, error: httpx.HTTPStatusError, path: str) -> PublishResult:
        status = error.response.status_code
        message = ERROR_MESSAGES.get(status, "Failed to upload file to GitHub")
        remaining = error.response.headers.get("x-ratelimit-remaining")
        if remaining:
            message += f" (Rate limit: {remaining} remaining)"
        log.error("%s: %s", message, error)
        return PublishResult(success=False, path=path, message=message, status=status)

    # -- README -------------------------------------------------------------

    def latest_resource(self, folder: str) -> tuple[int, str] | None:
        numbers = self.list_resource_numbers(folder)
        if not numbers:
            return None
        latest = numbers[-1]
        return latest, self.file_url(f"{folder}/{resource_file_name(latest)}")

    def render_readme(self, folders: list[Folder], header: str) -> str:
        sections = []
        for folder in folders:
            latest = self.latest_resource(folder.repo_path)
            if latest:
                number, url = latest
                body = f'<p>• <a href="{url}">#{number:03d}</a> - Latest update from {folder.name}</p>'
            else:
                body = "<p>No recent updates</p>"
            sections.append(
                f'<div align="center">\n  <h2 style="margin: 0;">{folder.name}</h2>\n  {body}\n</div>'
            )
        return header.rstrip() + "\n\n" + "\n\n".join(sections) + "\n"

    def update_readme(self, folders: list[Folder], header: str) -> bool:
        """Rewrite README.md with a link to the newest file in each folder."""
        try:
            content = self.render_readme(folders, header)
            sha = None
            try:
                sha = self._get_contents("README.md").get("sha")
            except httpx.HTTPStatusError as e:
                if e.response.status_code != 404:
                    raise
            self.put_file("README.md", content, "Update README with latest resources", sha=sha)
        except httpx.HTTPError as e:
            log.warning("Failed to update README: %s", e)
            return False
        log.info("README updated")
        return True

    def close(self) -> None:
        self.client.close()


def readme_header(title: str, tagline: str = "") -> str:
    lines = ['<div align="center">', f"  <h1>{title}</h1>"]
    if tagline:
        lines.append(f"  <p><strong>{tagline}</strong></p>")
    lines.extend(["</div>", "", "---"])
    return "\n".join(lines)
