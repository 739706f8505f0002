"""Service for creating, restoring, listing and deleting store backups."""

import itertools
import logging
import os
import shutil
import tempfile
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path

from trackhabit.errors import (
    BackupError,
    BackupIOError,
    InvalidBackupError,
    RestoreFailedError,
    StoreUnavailableError,
)
from trackhabit.models.backup_artifact import BackupArtifact
from trackhabit.utils import archive
from trackhabit.utils.result import Result

log = logging.getLogger("backup_manager")

# Shared by every manager in the process so generated names never repeat.
_sequence = itertools.count(1)


class BackupManager:
    """Backs up and restores the habit store as a whole.

    Every public operation is queued on a single I/O thread and returns a
    ``concurrent.futures.Future`` resolving to a ``Result``; expected
    failures are reported through the result, never raised. Operations run
    one at a time in submission order. ``Future.cancel()`` only succeeds
    while an operation is still queued; once it has started it always runs
    through reopening the store.

    Backup and restore hold the store's exclusive lock while the store is
    closed. Never block on one of these futures while holding a store
    session: the operation waits for that session to finish.
    """

    def __init__(self, store, locations, app_version=None):
        """Initialize the backup manager.

        Args:
            store: HabitStore to back up and restore
            locations: StorageLocations resolving default and user paths
            app_version: Version recorded in archive manifests
        """
        self.store = store
        self.locations = locations
        self.app_version = app_version
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="backup-io")

    def create_backup(self, destination=None):
        """Queue a backup of the store.

        Args:
            destination: None for the default backup directory, a directory
                to receive a generated file name, or an exact ``.zip`` path

        Returns:
            Future: Resolves to ``Result[BackupArtifact]``
        """
        return self._submit(self._create_backup, destination)

    def restore_from_backup(self, source):
        """Queue replacing the store's contents with those of a backup.

        Returns:
            Future: Resolves to ``Result[None]``
        """
        return self._submit(self._restore_from_backup, source)

    def list_available_backups(self, directory=None):
        """Queue listing the backups in a directory, newest first.

        Returns:
            Future: Resolves to ``Result[list[BackupArtifact]]``
        """
        return self._submit(self._list_available_backups, directory)

    def delete_backup(self, path):
        """Queue deleting a backup file. Deleting a missing backup succeeds.

        Returns:
            Future: Resolves to ``Result[None]``
        """
        return self._submit(self._delete_backup, path)

    def shutdown(self, wait=True):
        """Stop accepting work; by default wait for queued operations."""
        self._executor.shutdown(wait=wait)

    def _submit(self, operation, *args):
        return self._executor.submit(self._run, operation, *args)

    def _run(self, operation, *args):
        name = operation.__name__.lstrip('_')
        try:
            return Result.success(operation(*args))
        except StoreUnavailableError as e:
            log.critical(f"{name} left the store unavailable: {e.message}")
            return Result.failure(e)
        except BackupError as e:
            log.error(f"{name} failed ({e.kind}): {e.message}")
            return Result.failure(e)
        except Exception as e:
            log.error(f"Unexpected error in {name}: {str(e)}", exc_info=True)
            return Result.failure(BackupIOError(f"Unexpected error: {str(e)}"))

    # create

    def _create_backup(self, destination):
        target = self._resolve_target(destination)
        log.info(f"Creating backup {target}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BackupIOError(f"Cannot create backup directory {target.parent}: {str(e)}") from e

        partial = target.with_name(target.name + '.part')
        created_at = datetime.utcnow()
        copy_error = None

        with self.store.exclusive():
            self.store.close()
            try:
                archive.write_archive(
                    partial,
                    self.store.path,
                    self.store.auxiliary_paths(),
                    created_at=created_at,
                    app_version=self.app_version,
                )
                os.replace(partial, target)
            except Exception as e:
                copy_error = e
                _remove_quietly(partial)
            finally:
                # A failure here supersedes any copy error.
                self.store.reopen()

        if copy_error is not None:
            raise BackupIOError(f"Could not write backup {target.name}: {str(copy_error)}") from copy_error

        archive.fsync_directory(target.parent)
        self._verify(target)
        artifact = BackupArtifact.from_path(target, created_at=created_at)
        log.info(f"Backup created: {artifact.path} ({artifact.size} bytes)")
        return artifact

    def _resolve_target(self, destination):
        if destination is None or not str(destination).strip():
            return self._generate_path(self.locations.backup_dir())
        path = self.locations.resolve(destination)
        if path.suffix == archive.ARCHIVE_SUFFIX:
            return path
        return self._generate_path(path)

    def _generate_path(self, directory):
        while True:
            name = archive.build_backup_name(datetime.utcnow(), next(_sequence))
            candidate = directory / name
            if not candidate.exists():
                return candidate

    def _verify(self, target):
        """Validate a freshly written archive, removing it if it is not usable."""
        try:
            if target.stat().st_size == 0:
                raise InvalidBackupError("archive is empty")
            archive.validate_archive(target)
        except InvalidBackupError as e:
            _remove_quietly(target)
            raise BackupIOError(f"Backup {target.name} failed verification: {e.message}") from e
        except OSError as e:
            _remove_quietly(target)
            raise BackupIOError(f"Backup {target.name} is not readable: {str(e)}") from e

    # restore

    def _restore_from_backup(self, source):
        source = self.locations.resolve(source)
        log.info(f"Restoring store from {source}")
        archive.validate_archive(source)

        live = self.store.path
        try:
            staging_dir = Path(tempfile.mkdtemp(prefix='.restore-', dir=live.parent))
        except OSError as e:
            raise RestoreFailedError(f"Cannot create staging directory: {str(e)}") from e

        try:
            try:
                staged = archive.stage_archive(source, staging_dir)
            except OSError as e:
                raise RestoreFailedError(f"Could not stage {source.name}: {str(e)}") from e
            self._swap_in(staged)
        finally:
            shutil.rmtree(staging_dir, ignore_errors=True)

        log.info(f"Store restored from {source}")
        return None

    def _swap_in(self, staged):
        live = self.store.path
        swap_error = None

        with self.store.exclusive():
            self.store.close()
            try:
                self._discard_journal_files()
                os.replace(staged, live)
            except (OSError, RestoreFailedError) as e:
                swap_error = e
            finally:
                self.store.reopen()

        if swap_error is not None:
            raise RestoreFailedError(
                f"Could not replace the store, the current data was kept: {str(swap_error)}"
            ) from swap_error
        archive.fsync_directory(live.parent)

    def _discard_journal_files(self):
        """Remove the closed store's journal files so they cannot be replayed onto the restored file."""
        stale = self.store.auxiliary_paths()
        for path in stale:
            if path.name.endswith('-wal') and path.stat().st_size > 0:
                raise RestoreFailedError(f"{path.name} still holds changes that were not checkpointed")
        for path in stale:
            path.unlink()

    # list

    def _list_available_backups(self, directory):
        if directory is None:
            directory = self.locations.backup_dir()
        else:
            directory = self.locations.resolve(directory)

        try:
            directory.mkdir(parents=True, exist_ok=True)
            entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
        except OSError as e:
            raise BackupIOError(f"Cannot read backup directory {directory}: {str(e)}") from e

        artifacts = []
        for entry in entries:
            if not archive.is_backup_name(entry.name):
                continue
            path = Path(entry.path)
            try:
                if not entry.is_file():
                    continue
                manifest = archive.read_manifest(path)
                created_at = archive.manifest_created_at(manifest) or archive.timestamp_from_name(entry.name)
                artifacts.append(BackupArtifact.from_path(path, created_at=created_at))
            except InvalidBackupError as e:
                log.warning(f"Skipping unreadable backup {entry.name}: {e.message}")
            except OSError as e:
                log.debug(f"Skipping {entry.name}: {str(e)}")
            except (TypeError, ValueError) as e:
                log.warning(f"Skipping backup {entry.name} with a malformed manifest: {str(e)}")

        artifacts.sort(key=lambda artifact: (artifact.created_at, artifact.name), reverse=True)
        return artifacts

    # delete

    def _delete_backup(self, path):
        target = self.locations.resolve(path)
        if target.suffix != archive.ARCHIVE_SUFFIX or self._is_store_file(target):
            raise InvalidBackupError(f"{target.name} is not a backup file")

        try:
            target.unlink()
        except FileNotFoundError:
            log.info(f"Backup already absent: {target}")
            return None
        except OSError as e:
            raise BackupIOError(f"Could not delete {target.name}: {str(e)}") from e

        log.info(f"Deleted backup {target}")
        return None

    def _is_store_file(self, path):
        live = self.store.path
        return path == live or (path.parent == live.parent and path.name.startswith(live.name))

def _remove_quietly(path):
    try:
        Path(path).unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        log.warning(f"Could not remove partial backup {path}: {str(e)}")
