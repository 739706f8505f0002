"""Backup archive layout: writing, validating and staging zip artifacts.

An artifact is a zip file holding the primary database file as ``store.db``,
any SQLite journal files that existed next to it (``store.db-wal`` and so
on) and a ``manifest.json`` with per-file sizes and SHA-256 checksums.
"""

import hashlib
import json
import logging
import os
import re
import shutil
import sqlite3
import zipfile
from datetime import datetime, timezone
from pathlib import Path

from trackhabit.errors import InvalidBackupError

log = logging.getLogger(__name__)

ARCHIVE_PREFIX = 'backup_'
ARCHIVE_SUFFIX = '.zip'
PRIMARY_ENTRY = 'store.db'
MANIFEST_ENTRY = 'manifest.json'
AUXILIARY_ENTRIES = tuple(PRIMARY_ENTRY + suffix for suffix in ('-wal', '-shm', '-journal'))
ALLOWED_ENTRIES = (PRIMARY_ENTRY, MANIFEST_ENTRY) + AUXILIARY_ENTRIES

FORMAT_NAME = 'trackhabit-backup'
FORMAT_VERSION = 1
SQLITE_HEADER = b'SQLite format 3\x00'
TIMESTAMP_FORMAT = '%Y-%m-%d_%H-%M-%S'
BUFFER_SIZE = 64 * 1024

NAME_PATTERN = re.compile(
    r'^' + re.escape(ARCHIVE_PREFIX)
    + r'(\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2})_(\d{4,})'
    + re.escape(ARCHIVE_SUFFIX) + r'$'
)


def build_backup_name(created_at, sequence):
    """File name for a backup, e.g. ``backup_2024-05-01_03-00-00_0001.zip``.

    Names sort chronologically; the sequence number separates backups taken
    within the same second.
    """
    return f"{ARCHIVE_PREFIX}{created_at.strftime(TIMESTAMP_FORMAT)}_{sequence:04d}{ARCHIVE_SUFFIX}"

def is_backup_name(name):
    return NAME_PATTERN.match(name) is not None

def timestamp_from_name(name):
    match = NAME_PATTERN.match(name)
    if not match:
        return None
    try:
        return datetime.strptime(match.group(1), TIMESTAMP_FORMAT)
    except ValueError:
        return None

def file_checksum(path):
    """SHA-256 hex digest of a file."""
    digest = hashlib.sha256()
    with open(path, 'rb') as fh:
        for chunk in iter(lambda: fh.read(BUFFER_SIZE), b''):
            digest.update(chunk)
    return digest.hexdigest()

def write_archive(target, primary, auxiliary=(), created_at=None, app_version=None):
    """Write the database files into a new zip archive at ``target``.

    Args:
        target: Archive path to create (overwritten if present)
        primary: Primary database file
        auxiliary: Journal files living next to the primary file
        created_at: Creation time recorded in the manifest
        app_version: Application version recorded in the manifest

    Returns:
        dict: The manifest written into the archive
    """
    primary = Path(primary)
    created_at = created_at or datetime.utcnow()
    entries = [(primary, PRIMARY_ENTRY)]
    for path in auxiliary:
        path = Path(path)
        suffix = path.name[len(primary.name):]
        arcname = PRIMARY_ENTRY + suffix
        if arcname not in AUXILIARY_ENTRIES:
            log.warning(f"Skipping unexpected auxiliary file {path.name}")
            continue
        entries.append((path, arcname))

    manifest = {
        'format': FORMAT_NAME,
        'format_version': FORMAT_VERSION,
        'created_at': created_at.isoformat(),
        'app_version': app_version,
        'files': {},
    }

    with zipfile.ZipFile(target, 'w', compression=zipfile.ZIP_DEFLATED) as zf:
        for path, arcname in entries:
            manifest['files'][arcname] = {
                'size': path.stat().st_size,
                'sha256': file_checksum(path),
            }
            zf.write(path, arcname)
        zf.writestr(MANIFEST_ENTRY, json.dumps(manifest, indent=2))

    fsync_file(target)
    return manifest

def read_manifest(path):
    """Manifest of an archive, or an empty dict when it carries none.

    Raises:
        InvalidBackupError: If the file is not a readable zip archive
    """
    try:
        with zipfile.ZipFile(path) as zf:
            if MANIFEST_ENTRY not in zf.namelist():
                return {}
            return json.loads(zf.read(MANIFEST_ENTRY).decode('utf-8'))
    except (zipfile.BadZipFile, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidBackupError(f"{Path(path).name} is not a readable backup archive: {e}") from e

def manifest_created_at(manifest):
    """Creation time recorded in a manifest as naive UTC, or None."""
    if not isinstance(manifest, dict):
        return None
    value = manifest.get('created_at')
    if not isinstance(value, str) or not value:
        return None
    try:
        created = datetime.fromisoformat(value)
    except ValueError:
        return None
    if created.tzinfo is not None:
        created = created.astimezone(timezone.utc).replace(tzinfo=None)
    return created

def validate_archive(path):
    """Check an archive before anything is done with it.

    Validation never modifies the archive or the live store.

    Returns:
        dict: The archive manifest (empty if it has none)

    Raises:
        InvalidBackupError: If any check fails
    """
    path = Path(path)
    if not path.is_file():
        raise InvalidBackupError(f"Backup file not found: {path}")
    try:
        if path.stat().st_size == 0:
            raise InvalidBackupError(f"Backup file is empty: {path.name}")
        if not zipfile.is_zipfile(path):
            raise InvalidBackupError(f"{path.name} is not a zip archive")

        with zipfile.ZipFile(path) as zf:
            names = zf.namelist()
            unexpected = [name for name in names if name not in ALLOWED_ENTRIES]
            if unexpected:
                raise InvalidBackupError(
                    f"{path.name} contains unexpected entries",
                    details={'entries': unexpected}
                )
            if PRIMARY_ENTRY not in names:
                raise InvalidBackupError(f"{path.name} does not contain a database")

            corrupt = zf.testzip()
            if corrupt is not None:
                raise InvalidBackupError(f"{path.name} is corrupt (bad entry {corrupt})")

            with zf.open(PRIMARY_ENTRY) as fh:
                if fh.read(len(SQLITE_HEADER)) != SQLITE_HEADER:
                    raise InvalidBackupError(f"{path.name} does not contain a SQLite database")

            manifest = {}
            if MANIFEST_ENTRY in names:
                manifest = json.loads(zf.read(MANIFEST_ENTRY).decode('utf-8'))
                _verify_manifest(zf, manifest, path.name)
            return manifest
    except InvalidBackupError:
        raise
    except (zipfile.BadZipFile, json.JSONDecodeError, UnicodeDecodeError,
            ValueError, TypeError, AttributeError, KeyError) as e:
        raise InvalidBackupError(f"{path.name} could not be read: {e}") from e
    except OSError as e:
        raise InvalidBackupError(f"{path.name} could not be read: {e}") from e

def _verify_manifest(zf, manifest, archive_name):
    if not isinstance(manifest, dict):
        raise InvalidBackupError(f"{archive_name} has a malformed manifest")
    if manifest.get('format') != FORMAT_NAME:
        raise InvalidBackupError(f"{archive_name} has an unknown format")
    version = manifest.get('format_version', 0)
    if isinstance(version, bool) or not isinstance(version, int):
        raise InvalidBackupError(f"{archive_name} has a malformed format version")
    if version > FORMAT_VERSION:
        raise InvalidBackupError(f"{archive_name} was written by a newer version")

    files = manifest.get('files') or {}
    if not isinstance(files, dict):
        raise InvalidBackupError(f"{archive_name} has a malformed file list")
    for arcname, expected in files.items():
        if not isinstance(expected, dict):
            raise InvalidBackupError(f"{archive_name} has a malformed entry for {arcname}")
        if arcname not in zf.namelist():
            raise InvalidBackupError(f"{archive_name} is missing {arcname}")
        digest = hashlib.sha256()
        with zf.open(arcname) as fh:
            for chunk in iter(lambda: fh.read(BUFFER_SIZE), b''):
                digest.update(chunk)
        if expected.get('sha256') and digest.hexdigest() != expected['sha256']:
            raise InvalidBackupError(f"Checksum mismatch for {arcname} in {archive_name}")

def stage_archive(path, staging_dir):
    """Extract an archive into ``staging_dir`` as a single self-contained database file.

    A write-ahead log shipped in the archive is folded into the staged
    database so that putting it live takes one rename. The staged file is
    integrity checked and flushed to disk.

    Returns:
        Path: The staged database file

    Raises:
        InvalidBackupError: If the staged database is not usable
        OSError: If extraction fails
    """
    staging_dir = Path(staging_dir)
    staged = staging_dir / PRIMARY_ENTRY

    try:
        with zipfile.ZipFile(path) as zf:
            names = zf.namelist()
            for arcname in (PRIMARY_ENTRY, PRIMARY_ENTRY + '-wal'):
                if arcname not in names:
                    continue
                with zf.open(arcname) as src, open(staging_dir / arcname, 'wb') as dst:
                    shutil.copyfileobj(src, dst, BUFFER_SIZE)
    except zipfile.BadZipFile as e:
        raise InvalidBackupError(f"{Path(path).name} changed while it was being restored: {e}") from e

    if not staged.is_file():
        raise InvalidBackupError(f"{Path(path).name} does not contain a database")
    with open(staged, 'rb') as fh:
        if fh.read(len(SQLITE_HEADER)) != SQLITE_HEADER:
            raise InvalidBackupError(f"{Path(path).name} does not contain a SQLite database")

    try:
        connection = sqlite3.connect(staged)
        try:
            connection.execute('PRAGMA wal_checkpoint(TRUNCATE)')
            connection.execute('PRAGMA journal_mode=DELETE')
            result = connection.execute('PRAGMA quick_check').fetchone()
        finally:
            connection.close()
    except sqlite3.DatabaseError as e:
        raise InvalidBackupError(f"Backup database is not usable: {e}") from e

    if not result or result[0] != 'ok':
        raise InvalidBackupError(
            "Backup database failed its integrity check",
            details={'quick_check': result[0] if result else None}
        )

    fsync_file(staged)
    return staged

def fsync_file(path):
    with open(path, 'rb') as fh:
        os.fsync(fh.fileno())

def fsync_directory(path):
    """Flush a directory entry so a completed rename survives a crash."""
    if os.name == 'nt':
        return
    try:
        fd = os.open(path, os.O_RDONLY)
    except OSError as e:
        log.warning(f"Could not open {path} to sync it: {e}")
        return
    try:
        os.fsync(fd)
    except OSError as e:
        log.warning(f"Could not sync directory {path}: {e}")
    finally:
        os.close(fd)
