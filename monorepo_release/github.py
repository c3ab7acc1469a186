"""Minimal GitHub REST client for tags, releases and release assets."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import httpx
from pydantic import BaseModel

from .errors import ExternalError

API_URL = "https://api.github.com"
UPLOADS_URL = "https://uploads.github.com"
CHUNK_SIZE = 64 * 1024


class Repo(BaseModel):
    """A GitHub repository in ``owner/name`` form."""

    owner: str
    name: str

    @classmethod
    def parse(cls, value: str) -> Repo:
        owner, sep, name = value.partition("/")
        if not sep or not owner or not name:
            raise ValueError(f"Invalid repo name {value!r}, expected 'owner/name'")
        return cls(owner=owner, name=name)

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"


class GitHubClient:
    def __init__(
        self,
        token: str,
        *,
        base_url: str = API_URL,
        uploads_url: str = UPLOADS_URL,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.uploads_url = uploads_url
        self.client = httpx.Client(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=httpx.Timeout(60.0, connect=10.0),
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def _request(self, what: str, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, wrapping HTTP and file-read failures in ExternalError."""
        try:
            response = self.client.request(method, url, **kwargs)
            response.raise_for_status()
        except (httpx.HTTPError, OSError) as exc:
            raise ExternalError(f"{what}: {exc}") from exc
        return response

    def _request_json(self, what: str, method: str, url: str, **kwargs: Any) -> Any:
        response = self._request(what, method, url, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise ExternalError(f"{what}: malformed response body: {exc}") from exc

    def combined_status(self, repo: Repo, sha: str) -> dict[str, Any]:
        """Combined commit status; fails if the commit is unknown to GitHub."""
        return self._request_json(
            "Current commit is missing in the GitHub remote",
            "GET",
            f"/repos/{repo.owner}/{repo.name}/commits/{sha}/status",
        )

    def create_tag_ref(self, repo: Repo, tag: str, sha: str) -> None:
        self._request(
            "Failed to create new tag in GitHub repo",
            "POST",
            f"/repos/{repo.owner}/{repo.name}/git/refs",
            json={"ref": f"refs/tags/{tag}", "sha": sha},
        )

    def create_release(self, repo: Repo, tag: str, title: str, body: str) -> int:
        """Create a published release for an existing tag and return its id."""
        what = "Failed to create GitHub release"
        data = self._request_json(
            what,
            "POST",
            f"/repos/{repo.owner}/{repo.name}/releases",
            json={
                "tag_name": tag,
                "name": title,
                "body": body,
                "draft": False,
                "prerelease": False,
            },
        )
        try:
            return int(data["id"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ExternalError(f"{what}: response has no release id") from exc

    def upload_release_asset(self, repo: Repo, release_id: int, path: Path) -> None:
        """Stream a file to the release as a binary asset."""
        what = f"Artifact upload failed for {path.name}"
        try:
            size = path.stat().st_size
        except OSError as exc:
            raise ExternalError(f"{what}: {exc}") from exc
        self._request(
            what,
            "POST",
            f"{self.uploads_url}/repos/{repo.owner}/{repo.name}"
            f"/releases/{release_id}/assets",
            params={"name": path.name},
            headers={
                "Content-Type": "application/octet-stream",
                "Content-Length": str(size),
            },
            content=_read_chunks(path),
        )


def _read_chunks(path: Path) -> Iterator[bytes]:
    with path.open("rb") as fh:
        while chunk := fh.read(CHUNK_SIZE):
            yield chunk
