"""
GitHub Backup Client

Pushes the serialized dashboard snapshot to a file in a GitHub repository
through the contents API, and pulls it back. The remote copy is a plain
last-writer-wins backup: no merge, no conflict detection.

Usage:
    with GitHubBackupClient(token, "owner/notes") as client:
        client.push(encode_snapshot(store.state))
        state = decode_snapshot(client.pull())
"""

from __future__ import annotations

import base64
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import httpx
from loguru import logger

from studydesk.core.dates import iso_timestamp, utc_now
from studydesk.errors import BackupError, BackupNotConfiguredError, BackupNotFoundError

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_BACKUP_PATH = "upsc_dashboard_backup.json"


@dataclass
class BackupResult:
    """Outcome of a push."""

    path: str
    sha: str | None
    created: bool  # no earlier backup existed
    message: str


def encode_content(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_content(content: str) -> str:
    # The contents API wraps base64 at 60 columns
    try:
        return base64.b64decode("".join(content.split()), validate=True).decode("utf-8")
    except ValueError as e:
        # binascii.Error and UnicodeDecodeError are both ValueErrors
        raise BackupError("Backup content is not valid base64 UTF-8") from e


class GitHubBackupClient:
    """
    HTTP client for the GitHub contents API.

    Args:
        token: Personal access token with repo scope
        repo: Repository as ``owner/name``
        path: File path inside the repository
        api_url: API base URL
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests use httpx.MockTransport)
        clock: Returns the current time for the commit message
    """

    def __init__(
        self,
        token: str,
        repo: str,
        path: str = DEFAULT_BACKUP_PATH,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        if not token or not repo:
            raise BackupNotConfiguredError("Please configure GitHub settings first.")
        self.token = token
        self.repo = repo.strip("/")
        self.path = path
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.clock = clock
        self._transport = transport
        self._client: httpx.Client | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Any,
        token: str,
        repo: str,
        **kwargs: Any,
    ) -> GitHubBackupClient:
        return cls(
            token,
            repo,
            path=settings.backup_path,
            api_url=settings.github_api_url,
            timeout=settings.backup_timeout_seconds,
            **kwargs,
        )

    def __enter__(self) -> GitHubBackupClient:
        self._ensure_client()
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _ensure_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.api_url,
                headers={
                    "Authorization": f"token {self.token}",
                    "Accept": "application/vnd.github+json",
                },
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        if self._client:
            self._client.close()
            self._client = None

    @property
    def contents_url(self) -> str:
        return f"/repos/{self.repo}/contents/{self.path}"

    # =========================================================================
    # Requests
    # =========================================================================

    def _get_file(self) -> dict[str, Any] | None:
        """Current file metadata, or None if it does not exist."""
        client = self._ensure_client()
        try:
            response = client.get(self.contents_url)
        except httpx.RequestError as e:
            raise BackupError(f"Connection error: {e}") from e

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise BackupError(
                f"GitHub returned {response.status_code} for {self.path}",
                status_code=response.status_code,
            )
        return response.json()

    def push(self, document: str) -> BackupResult:
        """
        Upload ``document`` as the backup file.

        Looks up the existing file's sha first so the PUT replaces it.

        Raises:
            BackupError: On connection failure or a non-2xx response
        """
        existing = self._get_file()
        sha = existing.get("sha") if existing else None
        message = f"Backup: {iso_timestamp(self.clock())}"

        body: dict[str, Any] = {"message": message, "content": encode_content(document)}
        if sha:
            body["sha"] = sha

        client = self._ensure_client()
        try:
            response = client.put(self.contents_url, json=body)
        except httpx.RequestError as e:
            raise BackupError(f"Connection error: {e}") from e

        if not response.is_success:
            logger.error("Backup to {} failed: {}", self.repo, response.status_code)
            raise BackupError(
                "Backup failed. Check settings/permissions.",
                status_code=response.status_code,
            )

        new_sha = response.json().get("content", {}).get("sha")
        logger.info("Backed up dashboard to {}/{}", self.repo, self.path)
        return BackupResult(path=self.path, sha=new_sha, created=sha is None, message=message)

    def pull(self) -> str:
        """
        Download the backup file.

        Raises:
            BackupNotFoundError: If no backup exists
            BackupError: On connection failure or other non-2xx responses
        """
        existing = self._get_file()
        if existing is None:
            raise BackupNotFoundError("Restore failed. File may not exist.", status_code=404)
        content = existing.get("content")
        if not isinstance(content, str):
            raise BackupError("Backup response has no content")
        logger.info("Fetched backup from {}/{}", self.repo, self.path)
        return decode_content(content)
