"""Where backups live by default and how user-chosen paths are interpreted."""

from pathlib import Path


class StorageLocations:
    """Resolves the default backup directory and user supplied locations.

    Args:
        base_dir: Directory relative backup locations are anchored to
            (the Flask instance path)
        backup_dir: Default backup directory, absolute or relative to ``base_dir``
    """

    def __init__(self, base_dir, backup_dir='backups'):
        self.base_dir = Path(base_dir).expanduser().resolve()
        self._backup_dir = Path(backup_dir).expanduser()

    def backup_dir(self):
        """Absolute default backup directory. It is not created here."""
        if self._backup_dir.is_absolute():
            return self._backup_dir
        return (self.base_dir / self._backup_dir).resolve()

    def resolve(self, path):
        """Absolute form of a user chosen import or export location.

        A bare file name (``backup_....zip``) refers to the default backup
        directory; any other relative path is taken from the working directory.
        """
        path = Path(path).expanduser()
        if not path.is_absolute() and len(path.parts) == 1:
            return self.backup_dir() / path
        return path.resolve()

    def is_managed(self, path):
        """Whether ``path`` is a bare name or resolves inside the default backup directory."""
        resolved = self.resolve(path).resolve()
        root = self.backup_dir().resolve()
        return resolved == root or root in resolved.parents

    def __repr__(self):
        return f"<StorageLocations {self.backup_dir()}>"
