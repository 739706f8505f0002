"""Backup artifact model describing one backup file on disk."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True)
class BackupArtifact:
    """Snapshot of a backup file's identity taken when it was created or listed.

    The attributes are not kept in sync with the file; it may be deleted
    by the user or the OS at any time afterwards.
    """

    path: Path
    name: str
    created_at: datetime
    size: int

    @classmethod
    def from_path(cls, path, created_at=None):
        """Build an artifact from a file, falling back to its mtime for the creation time."""
        path = Path(path)
        stat = path.stat()
        if created_at is None:
            created_at = datetime.utcfromtimestamp(stat.st_mtime)
        return cls(path=path, name=path.name, created_at=created_at, size=stat.st_size)

    def exists(self):
        return self.path.is_file()

    def to_dict(self):
        """Convert artifact to dictionary."""
        return {
            'name': self.name,
            'path': str(self.path),
            'size': self.size,
            'size_formatted': format_size(self.size),
            'created_at': self.created_at.isoformat(),
            'created_at_formatted': self.created_at.strftime('%Y-%m-%d %H:%M:%S'),
        }

def format_size(size_bytes):
    """
    Format file size in human readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        str: Formatted size string
    """
    if size_bytes < 1024:
        return f"{size_bytes} bytes"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"
