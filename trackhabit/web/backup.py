import logging
from concurrent.futures import TimeoutError as FutureTimeoutError

from flask import Blueprint, jsonify, request, current_app

from trackhabit.errors import InvalidBackupError, ValidationError
from trackhabit.services.container import container

backup_bp = Blueprint("backup", __name__, url_prefix="/backup")
log = logging.getLogger(__name__)

def _backup_manager():
    return container().get('backup_manager')

def _managed_path(value):
    """Accept only backup names or paths inside the backup directory."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if not isinstance(value, str):
        raise ValidationError("Backup locations must be strings")
    if not container().get('storage_locations').is_managed(value):
        raise InvalidBackupError(f"{value} is outside the backup directory")
    return value

def wait_for(future):
    """Block until a backup operation finishes or BACKUP_TIMEOUT passes.

    Returns:
        Result: The operation outcome, or None if it is still running
    """
    timeout = current_app.config.get('BACKUP_TIMEOUT', 120)
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError:
        log.warning(f"Backup operation still running after {timeout}s")
        return None

def respond(result, status=200):
    if result is None:
        return jsonify({
            'success': False,
            'pending': True,
            'message': "Backup operation is still running",
        }), 202
    if result.is_failure:
        return jsonify(result.to_dict()), result.error.status_code
    return jsonify(result.to_dict()), status

def _flag(value, default=True):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).lower() in ('1', 'true', 'yes', 'on')

@backup_bp.route("/", methods=['GET'])
def index():
    """List backups, newest first. ``directory`` must lie inside the backup directory."""
    directory = _managed_path(request.args.get('directory'))
    result = wait_for(_backup_manager().list_available_backups(directory))
    return respond(result)

@backup_bp.route("/", methods=['POST'])
def create():
    """Create a backup, optionally at ``destination`` (a name or a path in the backup directory)."""
    data = request.get_json(silent=True) or {}
    destination = _managed_path(data.get('destination'))
    result = wait_for(_backup_manager().create_backup(destination))
    return respond(result, status=201)

@backup_bp.route("/restore", methods=['POST'])
def restore():
    """Restore the store from the backup named by ``path``.

    Unless ``safety_backup`` is false a backup of the current data is made
    first; the restore is not attempted if that backup fails.
    """
    data = request.get_json(silent=True) or {}
    path = data.get('path')
    if not path:
        raise ValidationError("A backup path is required")
    _managed_path(path)

    backup_manager = _backup_manager()
    safety = None
    if _flag(data.get('safety_backup')):
        safety_result = wait_for(backup_manager.create_backup())
        if safety_result is None or safety_result.is_failure:
            return respond(safety_result)
        safety = safety_result.value

    result = wait_for(backup_manager.restore_from_backup(path))
    if result is None or result.is_failure:
        return respond(result)

    return jsonify({
        'success': True,
        'data': {
            'restored_from': path,
            'safety_backup': safety.to_dict() if safety else None,
        }
    }), 200

@backup_bp.route("/", methods=['DELETE'])
def delete():
    """Delete the named backup; deleting a missing backup succeeds."""
    data = request.get_json(silent=True) or {}
    path = data.get('path') or request.args.get('path')
    if not path:
        raise ValidationError("A backup path is required")
    _managed_path(path)
    return respond(wait_for(_backup_manager().delete_backup(path)))
