"""Scheduled backup tasks."""

import logging
from trackhabit.extensions import scheduler
from trackhabit.services.container import container

log = logging.getLogger("backup_tasks")

def run_scheduled_backup(app=None):
    """Create a backup in the default directory and prune old ones.

    Returns:
        dict: Outcome with success status, the artifact and the rotation result
    """
    app = app or scheduler.app
    with app.app_context():
        backup_manager = container(app).get('backup_manager')
        timeout = app.config.get('BACKUP_TIMEOUT', 120)

        log.info("Starting scheduled backup")
        result = backup_manager.create_backup().result(timeout=timeout)

        if result.is_failure:
            log.error(f"Scheduled backup failed ({result.kind}): {result.error.message}")
            return {'success': False, 'error': result.error.to_dict()}

        log.info(f"Scheduled backup created: {result.value.path}")
        rotation = rotate_backups(backup_manager, app.config.get('BACKUP_COUNT', 5), timeout=timeout)
        return {'success': True, 'backup': result.value.to_dict(), 'rotation': rotation}

def rotate_backups(backup_manager, keep, directory=None, timeout=None):
    """Delete all but the newest ``keep`` backups.

    Args:
        backup_manager: BackupManager used to list and delete
        keep: Number of backups to keep
        directory: Backup directory (default directory when None)
        timeout: Seconds to wait for each operation

    Returns:
        dict: Rotation result with success status and deleted file names
    """
    listing = backup_manager.list_available_backups(directory).result(timeout=timeout)
    if listing.is_failure:
        log.error(f"Could not list backups for rotation: {listing.error.message}")
        return {'success': False, 'deleted': [], 'error': listing.error.to_dict()}

    deleted = []
    failed = []
    for artifact in listing.value[max(keep, 0):]:
        outcome = backup_manager.delete_backup(artifact.path).result(timeout=timeout)
        if outcome.is_success:
            deleted.append(artifact.name)
        else:
            failed.append(artifact.name)

    if deleted:
        log.info(f"Rotated out {len(deleted)} old backups")
    if failed:
        log.warning(f"Could not remove old backups: {', '.join(failed)}")
    return {'success': not failed, 'deleted': deleted, 'failed': failed}

def setup_backup_jobs(app):
    """Register backup jobs with the scheduler."""
    backup_schedule = app.config.get('BACKUP_SCHEDULE', '0 3 * * *')

    scheduler.add_job(
        id='scheduled_backup',
        func=run_scheduled_backup,
        trigger='cron',
        **parse_cron_expression(backup_schedule),
        replace_existing=True
    )

    app.logger.info(f"Scheduled backup job registered with cron: {backup_schedule}")

def parse_cron_expression(expression):
    """Parse cron expression into kwargs for APScheduler."""
    parts = expression.split()
    if len(parts) != 5:
        log.warning(f"Invalid cron expression '{expression}', backing up daily at 03:00")
        return {'hour': 3, 'minute': 0}

    minute, hour, day, month, day_of_week = parts
    return {
        'minute': minute,
        'hour': hour,
        'day': day,
        'month': month,
        'day_of_week': day_of_week
    }
