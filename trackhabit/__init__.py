import os
import atexit
from flask import Flask

from trackhabit.extensions import init_extensions
from trackhabit.errors import register_error_handlers
from trackhabit.logger import setup_logging


def create_app(test_config=None):
    """Application factory function.

    Args:
        test_config: Optional mapping applied over the environment's
            configuration class

    Returns:
        Flask: The configured application with its store open
    """
    app = Flask(__name__, instance_relative_config=True)

    from trackhabit.config import get_config
    if test_config is None:
        app.config.from_object(get_config(os.environ.get('FLASK_ENV', 'default')))
    else:
        app.config.from_object(get_config('testing' if test_config.get('TESTING') else None))
        app.config.from_mapping(test_config)

    # Ensure the instance folder exists
    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError as e:
        app.logger.warning(f"Could not create instance folder {app.instance_path}: {e}")

    database_path = os.path.expanduser(str(app.config['DATABASE_PATH']))
    if not os.path.isabs(database_path):
        database_path = os.path.join(app.instance_path, database_path)
    app.config['DATABASE_PATH'] = database_path

    setup_logging(app)
    init_extensions(app)
    register_error_handlers(app)
    register_blueprints(app)

    from trackhabit.cli import register_commands
    register_commands(app)

    from trackhabit.services.container import init_container
    init_container(app)
    app.logger.info(f"Habit store ready at {database_path}")

    from trackhabit.tasks import init_tasks
    init_tasks(app)

    if not app.config.get('TESTING'):
        atexit.register(shutdown_app, app)

    return app

def shutdown_app(app):
    """Stop scheduled jobs and background I/O, then close the store."""
    from trackhabit.services.container import EXTENSION_KEY
    from trackhabit.tasks import shutdown_tasks

    shutdown_tasks()
    service_container = app.extensions.pop(EXTENSION_KEY, None)
    if service_container is not None:
        service_container.teardown()

def register_blueprints(app):
    """Register all blueprints with the application."""
    from trackhabit.web.habits import habits_bp
    from trackhabit.web.backup import backup_bp

    app.register_blueprint(habits_bp)
    app.register_blueprint(backup_bp)
    app.logger.info("Registered blueprints: habits, backup")
