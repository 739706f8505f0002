import pytest

from trackhabit import create_app
from trackhabit.models.habit_log_repository import SqlAlchemyHabitLogRepository
from trackhabit.models.habit_repository import SqlAlchemyHabitRepository
from trackhabit.services.backup_manager import BackupManager
from trackhabit.services.container import container
from trackhabit.services.storage_locations import StorageLocations
from trackhabit.store import HabitStore


@pytest.fixture
def store(tmp_path):
    habit_store = HabitStore(tmp_path / "data" / "habits.db")
    habit_store.open()
    yield habit_store
    habit_store.close()


@pytest.fixture
def habit_repository(store):
    return SqlAlchemyHabitRepository(store)


@pytest.fixture
def habit_log_repository(store):
    return SqlAlchemyHabitLogRepository(store)


@pytest.fixture
def backup_dir(tmp_path):
    return tmp_path / "backups"


@pytest.fixture
def locations(tmp_path, backup_dir):
    return StorageLocations(tmp_path, backup_dir)


@pytest.fixture
def backup_manager(store, locations):
    manager = BackupManager(store, locations, app_version="test")
    yield manager
    manager.shutdown(wait=True)


@pytest.fixture
def seeded(habit_repository, habit_log_repository):
    """Two habits with a few streak logs."""
    reading = habit_repository.insert("Reading")
    smoking = habit_repository.insert("No smoking")
    habit_log_repository.insert(reading.id, 3)
    habit_log_repository.insert(reading.id, 12, trigger="travel")
    habit_log_repository.insert(smoking.id, 40, notes="new record")
    return {'reading': reading, 'smoking': smoking}


@pytest.fixture
def app(tmp_path):
    test_config = {
        "TESTING": True,
        "SECRET_KEY": "testing",
        "DATABASE_PATH": str(tmp_path / "instance" / "trackhabit.db"),
        "BACKUP_DIRECTORY": str(tmp_path / "backups"),
        "BACKUP_TIMEOUT": 30,
    }
    flask_app = create_app(test_config)
    yield flask_app
    container(flask_app).teardown()


@pytest.fixture
def client(app):
    with app.test_client() as testing_client:
        yield testing_client


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


@pytest.fixture
def snapshot(habit_repository, habit_log_repository):
    """Callable returning a comparable view of everything in the store."""
    def take():
        habits = [(h.id, h.name, h.is_active) for h in habit_repository.get_all()]
        logs = sorted(
            (entry.id, entry.habit_id, entry.streak_duration, entry.trigger, entry.notes)
            for entry in habit_log_repository.get_all()
        )
        return habits, logs
    return take
