"""Tests for the backup CLI commands"""

from concurrent.futures import Future

from trackhabit.services.container import container


def test_init_db(runner, app):
    result = runner.invoke(args=['init-db'])

    assert result.exit_code == 0
    assert app.config['DATABASE_PATH'] in result.output

def test_create_and_list_backups(runner, tmp_path):
    created = runner.invoke(args=['create-backup'])
    listed = runner.invoke(args=['list-backups'])

    assert created.exit_code == 0
    assert "Backup created" in created.output
    assert listed.exit_code == 0
    assert str(tmp_path / "backups") in listed.output

def test_list_backups_empty(runner):
    result = runner.invoke(args=['list-backups'])

    assert result.exit_code == 0
    assert "No backups found" in result.output

def test_create_backup_to_file(runner, tmp_path):
    target = tmp_path / "export.zip"

    result = runner.invoke(args=['create-backup', '--output', str(target)])

    assert result.exit_code == 0
    assert target.is_file()

def test_restore_backup(runner, app, tmp_path):
    habits = container(app).get('habit_repository')
    habits.insert("Reading")
    target = tmp_path / "export.zip"
    runner.invoke(args=['create-backup', '--output', str(target)])
    habits.insert("Added later")

    result = runner.invoke(args=['restore-backup', str(target), '--no-safety-backup'])

    assert result.exit_code == 0
    assert [h.name for h in habits.get_all()] == ["Reading"]

def test_restore_backup_creates_safety_backup(runner, tmp_path):
    target = tmp_path / "export.zip"
    runner.invoke(args=['create-backup', '--output', str(target)])

    result = runner.invoke(args=['restore-backup', str(target)])

    assert result.exit_code == 0
    assert "Safety backup created" in result.output
    assert len(list((tmp_path / "backups").glob("backup_*.zip"))) == 1

def test_restore_invalid_backup_fails(runner, tmp_path):
    junk = tmp_path / "junk.zip"
    junk.write_bytes(b"junk")

    result = runner.invoke(args=['restore-backup', str(junk), '--no-safety-backup'])

    assert result.exit_code == 1
    assert "invalid_backup" in result.output

def test_delete_backup(runner, tmp_path):
    target = tmp_path / "export.zip"
    runner.invoke(args=['create-backup', '--output', str(target)])

    result = runner.invoke(args=['delete-backup', str(target)])

    assert result.exit_code == 0
    assert not target.exists()

def test_delete_refuses_non_backup(runner, tmp_path):
    victim = tmp_path / "notes.txt"
    victim.write_text("keep")

    result = runner.invoke(args=['delete-backup', str(victim)])

    assert result.exit_code == 1
    assert victim.exists()

def test_create_backup_still_running(runner, app, mocker):
    mocker.patch.object(container(app).get('backup_manager'), 'create_backup', return_value=Future())
    app.config['BACKUP_TIMEOUT'] = 0.01

    result = runner.invoke(args=['create-backup'])

    assert result.exit_code == 1
    assert "still running" in result.output
