"""Remote backup of the dashboard snapshot."""

from studydesk.sync.github_backup import BackupResult, GitHubBackupClient

__all__ = ["BackupResult", "GitHubBackupClient"]
