"""Scheduled background tasks."""

import logging

from trackhabit.extensions import scheduler

log = logging.getLogger("tasks")

def init_tasks(app):
    """Register scheduled jobs and start the scheduler."""
    if app.config.get('TESTING'):
        log.info("Testing mode - scheduler disabled")
        return

    from trackhabit.tasks.backup_tasks import setup_backup_jobs

    if not app.config.get('ENABLE_SCHEDULED_BACKUPS', True):
        log.info("Scheduled backups are disabled")
        return

    setup_backup_jobs(app)
    log.info("Starting scheduler")
    try:
        scheduler.start()
    except Exception as e:
        log.error(f"Failed to start scheduler: {str(e)}")

def shutdown_tasks():
    """Stop the scheduler if it is running."""
    if scheduler.running:
        log.info("Shutting down scheduler")
        scheduler.shutdown(wait=False)
