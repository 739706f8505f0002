from flask import jsonify
from werkzeug.exceptions import HTTPException


class AppError(Exception):
    """Base exception class for application-specific errors."""

    def __init__(self, message=None, details=None, status_code=None):
        super().__init__(message)
        self.message = message or "An unexpected error occurred"
        self.details = details
        self.status_code = status_code or 500

    def to_dict(self):
        data = {'message': self.message}
        if self.details:
            data['details'] = self.details
        return data

class ValidationError(AppError):
    """Exception for data validation errors."""

    def __init__(self, message=None, details=None):
        super().__init__(
            message=message or "Validation error",
            details=details,
            status_code=400
        )

class ResourceNotFoundError(AppError):
    """Exception for requests to non-existent resources."""

    def __init__(self, message=None, details=None):
        super().__init__(
            message=message or "Resource not found",
            details=details,
            status_code=404
        )

class BackupError(AppError):
    """Base class for backup and restore failures.

    Each subclass carries a stable ``kind`` string so callers can tell the
    failures apart without isinstance checks (CLI output, JSON bodies).
    """

    kind = "backup_error"
    default_message = "Backup operation failed"
    default_status = 500

    def __init__(self, message=None, details=None):
        super().__init__(
            message=message or self.default_message,
            details=details,
            status_code=self.default_status
        )

    def to_dict(self):
        data = super().to_dict()
        data['kind'] = self.kind
        return data

class BackupIOError(BackupError):
    """A directory or file could not be created, read or written."""

    kind = "io_failure"
    default_message = "Backup I/O failure"

class InvalidBackupError(BackupError):
    """The backup artifact failed validation; nothing was modified."""

    kind = "invalid_backup"
    default_message = "Invalid backup file"
    default_status = 400

class RestoreFailedError(BackupError):
    """Staging or swapping the restored store failed; the original is preserved."""

    kind = "restore_failed"
    default_message = "Restore failed, the current data was kept"

class StoreUnavailableError(BackupError):
    """The store could not be (re)opened. The application is degraded."""

    kind = "store_unavailable"
    default_message = "The habit store is unavailable"
    default_status = 503

def register_error_handlers(app):
    """Register application error handlers."""

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        """Handle Werkzeug HTTP exceptions."""
        return jsonify({
            'success': False,
            'error': {'message': e.description, 'code': e.code}
        }), e.code

    @app.errorhandler(AppError)
    def handle_app_error(e):
        """Handle application specific errors."""
        if e.status_code >= 500:
            app.logger.error(f"{type(e).__name__}: {e.message}")
        return jsonify({'success': False, 'error': e.to_dict()}), e.status_code
