"""GitHub repository content store.

Reads and writes files through the GitHub contents API; every write is a
commit. The store remembers the blob SHA of each path it has read or
written and sends it with the next update, so GitHub rejects a write whose
base revision is stale instead of silently overwriting a concurrent change.

Files over 1 MB come back from the contents API without a body; those are
re-fetched with the raw media type, never read as empty.

Status mapping:
    404            -> ContentNotFound
    409 / 422      -> StorageError (revision conflict)
    other non-2xx  -> StorageError
    transport/timeout errors -> StorageError
"""

from __future__ import annotations

import base64
import binascii
import logging
import posixpath
from typing import Any
from urllib.parse import quote

import httpx

from issueops.core.errors import ContentNotFound, StorageError

logger = logging.getLogger(__name__)

_API_VERSION = "2022-11-28"
_CONFLICT_STATUSES = frozenset({409, 422})
_RAW_MEDIA_TYPE = "application/vnd.github.raw"


class GitHubContentStore:
    """Content store backed by one repository (and optionally one branch)."""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        *,
        branch: str = "",
        path_prefix: str = "",
        api_url: str = "https://api.github.com",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owner = owner
        self._repo = repo
        self._branch = branch
        self._prefix = path_prefix.strip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=api_url.rstrip("/"),
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": _API_VERSION,
            },
        )
        self._shas: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _repo_path(self, path: str) -> str:
        return posixpath.join(self._prefix, path) if self._prefix else path

    def _url(self, path: str) -> str:
        return (
            f"/repos/{self._owner}/{self._repo}/contents/"
            f"{quote(self._repo_path(path))}"
        )

    def revision(self, path: str) -> str | None:
        """Last known blob SHA for *path*, if any."""
        return self._shas.get(path)

    async def _get(self, path: str) -> dict[str, Any]:
        params = {"ref": self._branch} if self._branch else None
        try:
            resp = await self._client.get(self._url(path), params=params)
        except httpx.HTTPError as exc:
            raise StorageError(f"GitHub read failed for {path}: {exc}") from exc

        if resp.status_code == 404:
            self._shas.pop(path, None)
            raise ContentNotFound(path)
        if resp.status_code != 200:
            raise StorageError(
                f"GitHub read failed for {path}: HTTP {resp.status_code}"
            )

        body = resp.json()
        if not isinstance(body, dict) or "content" not in body:
            raise StorageError(f"Unexpected response format for {path}")
        return body

    async def _get_raw(self, path: str) -> str:
        """Fetch the file body with the raw media type (files over 1 MB)."""
        params = {"ref": self._branch} if self._branch else None
        try:
            resp = await self._client.get(
                self._url(path), params=params, headers={"Accept": _RAW_MEDIA_TYPE},
            )
        except httpx.HTTPError as exc:
            raise StorageError(f"GitHub raw read failed for {path}: {exc}") from exc
        if resp.status_code != 200:
            raise StorageError(
                f"GitHub raw read failed for {path}: HTTP {resp.status_code}"
            )
        try:
            return resp.content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise StorageError(f"Undecodable content for {path}: {exc}") from exc

    # ------------------------------------------------------------------
    # IContentStore
    # ------------------------------------------------------------------

    async def read(self, path: str) -> str:
        body = await self._get(path)
        inline = body.get("encoding", "base64") == "base64" and (
            body["content"] or not body.get("size")
        )
        if inline:
            try:
                content = base64.b64decode(body["content"]).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError) as exc:
                raise StorageError(f"Undecodable content for {path}: {exc}") from exc
        else:
            # Contents API omits bodies over 1 MB (encoding "none").
            logger.debug("Fetching %s via raw media type", path)
            content = await self._get_raw(path)
        if body.get("sha"):
            self._shas[path] = body["sha"]
        return content

    async def write(self, path: str, content: str, message: str = "") -> None:
        sha = self._shas.get(path)
        if sha is None:
            # Never seen: look up the current revision, or create.
            try:
                sha = (await self._get(path)).get("sha")
            except ContentNotFound:
                sha = None

        body: dict[str, Any] = {
            "message": message or f"Update {self._repo_path(path)}",
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        if sha:
            body["sha"] = sha
        if self._branch:
            body["branch"] = self._branch

        try:
            resp = await self._client.put(self._url(path), json=body)
        except httpx.HTTPError as exc:
            raise StorageError(f"GitHub write failed for {path}: {exc}") from exc

        if resp.status_code in _CONFLICT_STATUSES:
            self._shas.pop(path, None)
            raise StorageError(
                f"Revision conflict writing {path} (HTTP {resp.status_code}); "
                "the file changed since it was read"
            )
        if resp.status_code not in (200, 201):
            raise StorageError(
                f"GitHub write failed for {path}: HTTP {resp.status_code}"
            )

        data = resp.json()
        new_sha = (data.get("content") or {}).get("sha")
        if new_sha:
            self._shas[path] = new_sha
        commit_sha = (data.get("commit") or {}).get("sha")
        if not commit_sha:
            raise StorageError(f"No commit SHA returned writing {path}")
        logger.info("Committed %s as %s", self._repo_path(path), commit_sha[:7])

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
