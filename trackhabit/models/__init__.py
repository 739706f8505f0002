"""Database models for the application."""

# Import models so they are registered on the shared metadata
from trackhabit.models.base import Base
from trackhabit.models.habit import Habit
from trackhabit.models.habit_log import HabitLog
from trackhabit.models.backup_artifact import BackupArtifact
