import sys
import click
from flask.cli import with_appcontext

from trackhabit.services.container import container
from trackhabit.web.backup import wait_for

def _fail(result):
    if result is None:
        click.echo("Backup operation is still running, check again later", err=True)
        sys.exit(1)
    click.echo(f"Error ({result.kind}): {result.error.message}", err=True)
    sys.exit(1)

@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create the habit store and its tables if they do not exist."""
    store = container().get('store')
    click.echo(f"Habit store ready: {store.path}")

@click.command('create-backup')
@click.option('--output', help='Output directory or .zip file (defaults to BACKUP_DIRECTORY)')
@with_appcontext
def create_backup_command(output):
    """Create a backup of the habit store."""
    result = wait_for(container().get('backup_manager').create_backup(output))
    if result is None or result.is_failure:
        _fail(result)
    click.echo(f"Backup created: {result.value.path} ({result.value.to_dict()['size_formatted']})")

@click.command('restore-backup')
@click.argument('backup_file')
@click.option('--safety-backup/--no-safety-backup', default=True,
              help='Back up the current data before restoring')
@with_appcontext
def restore_backup_command(backup_file, safety_backup):
    """Replace the habit store with the contents of BACKUP_FILE."""
    backup_manager = container().get('backup_manager')

    if safety_backup:
        click.echo("Creating safety backup...")
        safety = wait_for(backup_manager.create_backup())
        if safety is None or safety.is_failure:
            _fail(safety)
        click.echo(f"Safety backup created: {safety.value.path}")

    result = wait_for(backup_manager.restore_from_backup(backup_file))
    if result is None or result.is_failure:
        _fail(result)
    click.echo(f"Store restored from {backup_file}")

@click.command('list-backups')
@click.option('--directory', help='Directory to list (defaults to BACKUP_DIRECTORY)')
@with_appcontext
def list_backups_command(directory):
    """List available backups, newest first."""
    result = wait_for(container().get('backup_manager').list_available_backups(directory))
    if result is None or result.is_failure:
        _fail(result)

    if not result.value:
        click.echo("No backups found")
        return
    for artifact in result.value:
        info = artifact.to_dict()
        click.echo(f"{info['created_at_formatted']}  {info['size_formatted']:>10}  {artifact.path}")

@click.command('delete-backup')
@click.argument('backup_file')
@with_appcontext
def delete_backup_command(backup_file):
    """Delete a backup file."""
    result = wait_for(container().get('backup_manager').delete_backup(backup_file))
    if result is None or result.is_failure:
        _fail(result)
    click.echo(f"Backup deleted: {backup_file}")

def register_commands(app):
    """Register CLI commands with the Flask application."""
    app.cli.add_command(init_db_command)
    app.cli.add_command(create_backup_command)
    app.cli.add_command(restore_backup_command)
    app.cli.add_command(list_backups_command)
    app.cli.add_command(delete_backup_command)
