"""Logging configuration."""

import os
import json
import logging
import logging.config
from datetime import datetime

# Attributes every LogRecord carries; anything else was passed through ``extra``
RESERVED_ATTRS = frozenset((
    'args', 'asctime', 'created', 'exc_info', 'exc_text', 'filename',
    'funcName', 'id', 'levelname', 'levelno', 'lineno', 'module',
    'msecs', 'message', 'msg', 'name', 'pathname', 'process',
    'processName', 'relativeCreated', 'stack_info', 'taskName',
    'thread', 'threadName',
))

class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def format(self, record):
        log_data = {
            'timestamp': datetime.utcnow().isoformat(),
            'level': record.levelname,
            'name': record.name,
            'thread': record.threadName,
            'message': record.getMessage(),
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in RESERVED_ATTRS and key not in log_data:
                log_data[key] = value

        return json.dumps(log_data, default=str)

def setup_logging(app):
    """Configure logging from the app's LOG_* settings."""
    log_level = str(app.config.get('LOG_LEVEL', 'INFO')).upper()
    formatter = 'json' if app.config.get('LOG_FORMAT', 'json') == 'json' else 'standard'

    handlers = {
        'console': {
            'class': 'logging.StreamHandler',
            'level': log_level,
            'formatter': formatter,
        },
    }

    log_dir = app.config.get('LOG_DIR')
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers['file'] = {
            'class': 'logging.handlers.RotatingFileHandler',
            'level': log_level,
            'formatter': formatter,
            'filename': os.path.join(log_dir, 'trackhabit.log'),
            'maxBytes': 10485760,  # 10 MB
            'backupCount': 5,
        }
        handlers['error_file'] = {
            'class': 'logging.handlers.RotatingFileHandler',
            'level': 'ERROR',
            'formatter': formatter,
            'filename': os.path.join(log_dir, 'error.log'),
            'maxBytes': 10485760,
            'backupCount': 5,
        }

    logging.config.dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
            'json': {
                '()': JSONFormatter
            }
        },
        'handlers': handlers,
        'loggers': {
            '': {  # Root logger
                'handlers': list(handlers),
                'level': log_level,
            },
            'werkzeug': {
                'level': 'WARNING',
                'handlers': ['console'],
                'propagate': False
            },
            'apscheduler': {
                'level': 'WARNING',
            }
        }
    })

    app.logger.info(f"Logging set up with level {log_level}")
