"""Service container for dependency injection."""

import logging
from typing import Dict, Any
from flask import current_app

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'trackhabit'

class ServiceContainer:
    """Container for the services of one application instance.

    Services are built lazily through ``_init_<name>`` methods the first
    time they are requested and live until ``teardown()``.
    """

    def __init__(self, config):
        """Initialize the service container.

        Args:
            config: Mapping with the application's settings
        """
        self.config = config
        self._services: Dict[str, Any] = {}

    def register(self, name: str, service: Any) -> None:
        """Register a service in the container.

        Args:
            name: Name of the service
            service: The service instance
        """
        self._services[name] = service

    def get(self, name: str) -> Any:
        """Get a service from the container by name.

        Args:
            name: Name of the service

        Returns:
            The service instance

        Raises:
            KeyError: If no such service exists
        """
        if name in self._services:
            return self._services[name]

        init_method = getattr(self, f"_init_{name}", None)
        if init_method is None:
            raise KeyError(f"Unknown service: {name}")

        service = init_method()
        self._services[name] = service
        return service

    def _init_store(self):
        """Initialize and open the habit store."""
        from trackhabit.store import HabitStore
        store = HabitStore(self.config['DATABASE_PATH'])
        store.open()
        return store

    def _init_storage_locations(self):
        from trackhabit.services.storage_locations import StorageLocations
        return StorageLocations(self.config['INSTANCE_PATH'], self.config.get('BACKUP_DIRECTORY', 'backups'))

    def _init_habit_repository(self):
        """Initialize the habit repository."""
        from trackhabit.models.habit_repository import SqlAlchemyHabitRepository
        return SqlAlchemyHabitRepository(self.get('store'))

    def _init_habit_log_repository(self):
        """Initialize the habit log repository."""
        from trackhabit.models.habit_log_repository import SqlAlchemyHabitLogRepository
        return SqlAlchemyHabitLogRepository(self.get('store'))

    def _init_backup_manager(self):
        """Initialize the backup manager."""
        from trackhabit.services.backup_manager import BackupManager
        return BackupManager(
            self.get('store'),
            self.get('storage_locations'),
            app_version=self.config.get('VERSION'),
        )

    def teardown(self):
        """Stop the backup manager and close the store."""
        backup_manager = self._services.pop('backup_manager', None)
        if backup_manager is not None:
            backup_manager.shutdown(wait=True)

        store = self._services.pop('store', None)
        if store is not None:
            store.close()

        self._services.clear()
        logger.info("Service container torn down")

def init_container(app):
    """Create the application's container and open its store."""
    config = dict(app.config)
    config.setdefault('INSTANCE_PATH', app.instance_path)
    service_container = ServiceContainer(config)
    service_container.get('store')
    app.extensions[EXTENSION_KEY] = service_container
    return service_container

def container(app=None):
    """Get the service container of the given or current application.

    Returns:
        ServiceContainer: The service container instance
    """
    app = app or current_app
    return app.extensions[EXTENSION_KEY]
