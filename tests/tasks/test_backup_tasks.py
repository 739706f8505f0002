"""Tests for scheduled backup tasks"""

from concurrent.futures import Future

from trackhabit.errors import BackupIOError
from trackhabit.services.container import container
from trackhabit.tasks.backup_tasks import parse_cron_expression, rotate_backups, run_scheduled_backup, setup_backup_jobs
from trackhabit.utils.result import Result


def test_parse_cron_expression():
    assert parse_cron_expression("15 2 * * mon") == {
        'minute': '15',
        'hour': '2',
        'day': '*',
        'month': '*',
        'day_of_week': 'mon',
    }

def test_parse_invalid_cron_expression():
    assert parse_cron_expression("every night") == {'hour': 3, 'minute': 0}

def test_rotate_keeps_newest(backup_manager, seeded):
    created = [backup_manager.create_backup().result(timeout=30).unwrap() for _ in range(4)]

    outcome = rotate_backups(backup_manager, keep=2, timeout=30)

    assert outcome['success'] is True
    assert sorted(outcome['deleted']) == sorted(a.name for a in created[:2])
    remaining = backup_manager.list_available_backups().result(timeout=30).unwrap()
    assert [a.name for a in remaining] == [created[3].name, created[2].name]

def test_rotate_with_fewer_backups_than_keep(backup_manager, seeded):
    backup_manager.create_backup().result(timeout=30)

    outcome = rotate_backups(backup_manager, keep=5, timeout=30)

    assert outcome == {'success': True, 'deleted': [], 'failed': []}

def test_run_scheduled_backup(app, tmp_path):
    app.config['BACKUP_COUNT'] = 1

    first = run_scheduled_backup(app)
    second = run_scheduled_backup(app)

    assert first['success'] is True
    assert second['success'] is True
    assert second['rotation']['deleted'] == [first['backup']['name']]
    assert [p.name for p in (tmp_path / "backups").iterdir()] == [second['backup']['name']]

def test_run_scheduled_backup_failure(app, mocker):
    future = Future()
    future.set_result(Result.failure(BackupIOError("disk full")))
    mocker.patch.object(container(app).get('backup_manager'), 'create_backup', return_value=future)

    outcome = run_scheduled_backup(app)

    assert outcome['success'] is False
    assert outcome['error']['kind'] == 'io_failure'

def test_setup_backup_jobs(app, mocker):
    add_job = mocker.patch('trackhabit.tasks.backup_tasks.scheduler.add_job')
    app.config['BACKUP_SCHEDULE'] = '30 4 * * *'

    setup_backup_jobs(app)

    kwargs = add_job.call_args.kwargs
    assert kwargs['id'] == 'scheduled_backup'
    assert kwargs['func'] is run_scheduled_backup
    assert kwargs['minute'] == '30'
    assert kwargs['hour'] == '4'
