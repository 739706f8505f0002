"""Tests for Result and the backup error kinds"""

import pytest

from trackhabit.errors import BackupIOError, InvalidBackupError, RestoreFailedError, StoreUnavailableError
from trackhabit.models.backup_artifact import BackupArtifact, format_size
from trackhabit.utils.result import Result


def test_success():
    result = Result.success(42)

    assert result.is_success
    assert not result.is_failure
    assert result.kind is None
    assert result.unwrap() == 42
    assert result.to_dict() == {'success': True, 'data': 42}

def test_failure():
    error = InvalidBackupError("bad archive")
    result = Result.failure(error)

    assert result.is_failure
    assert result.kind == 'invalid_backup'
    with pytest.raises(InvalidBackupError):
        result.unwrap()
    assert result.to_dict() == {
        'success': False,
        'error': {'message': 'bad archive', 'kind': 'invalid_backup'},
    }

def test_failure_needs_error():
    with pytest.raises(ValueError):
        Result.failure(None)

@pytest.mark.parametrize("error_class, kind, status", [
    (BackupIOError, 'io_failure', 500),
    (InvalidBackupError, 'invalid_backup', 400),
    (RestoreFailedError, 'restore_failed', 500),
    (StoreUnavailableError, 'store_unavailable', 503),
])
def test_error_kinds(error_class, kind, status):
    error = error_class()

    assert error.kind == kind
    assert error.status_code == status
    assert error.message

def test_artifact_serialisation(tmp_path):
    path = tmp_path / "backup_2024-05-01_03-00-00_0001.zip"
    path.write_bytes(b"x" * 2048)

    artifact = BackupArtifact.from_path(path)
    data = Result.success([artifact]).to_dict()['data'][0]

    assert data['name'] == path.name
    assert data['size'] == 2048
    assert data['size_formatted'] == "2.0 KB"
    assert artifact.exists()
    path.unlink()
    assert not artifact.exists()

@pytest.mark.parametrize("size, expected", [
    (512, "512 bytes"),
    (1536, "1.5 KB"),
    (5 * 1024 * 1024, "5.0 MB"),
    (3 * 1024 ** 3, "3.0 GB"),
])
def test_format_size(size, expected):
    assert format_size(size) == expected
