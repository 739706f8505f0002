"""Repository for habit log database operations."""

import logging

from sqlalchemy import func
from sqlalchemy.orm import selectinload

from trackhabit.errors import ResourceNotFoundError, ValidationError
from trackhabit.models.base_repository import BaseRepository
from trackhabit.models.habit import Habit
from trackhabit.models.habit_log import HabitLog

log = logging.getLogger("habit_log_repository")

EDITABLE_FIELDS = {'streak_duration', 'trigger', 'notes'}

class SqlAlchemyHabitLogRepository(BaseRepository):
    """SQL Alchemy implementation of habit log repository."""

    model_class = HabitLog

    def insert(self, habit_id, streak_duration, trigger=None, notes=None):
        """Record a streak for a habit."""
        def operation(session):
            if session.get(Habit, habit_id) is None:
                raise ResourceNotFoundError(f"Habit {habit_id} not found")
            habit_log = HabitLog(
                habit_id=habit_id,
                streak_duration=streak_duration,
                trigger=trigger,
                notes=notes,
            )
            session.add(habit_log)
            return habit_log

        habit_log = self._write(operation, f"logging streak for habit {habit_id}")
        log.info(f"Logged {habit_log.streak_duration} day streak for habit {habit_id}")
        return habit_log

    def update(self, log_id, **changes):
        """Correct a log entry."""
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown habit log fields: {', '.join(sorted(unknown))}")

        def operation(session):
            habit_log = self._get_or_raise(session, log_id)
            for key, value in changes.items():
                setattr(habit_log, key, value)
            return habit_log

        return self._write(operation, f"updating habit log {log_id}")

    def get_by_habit_id(self, habit_id):
        """Logs of a habit, newest first."""
        with self.store.session() as session:
            return (
                session.query(HabitLog)
                .filter_by(habit_id=habit_id)
                .order_by(HabitLog.created_at.desc(), HabitLog.id.desc())
                .all()
            )

    def get_habit_with_logs(self, habit_id):
        """A habit with its logs loaded (newest first), or None if it does not exist."""
        with self.store.session() as session:
            return (
                session.query(Habit)
                .options(selectinload(Habit.logs))
                .filter_by(id=habit_id)
                .one_or_none()
            )

    def get_longest_streak_for_habit(self, habit_id):
        """The log with the longest streak for a habit, or None."""
        with self.store.session() as session:
            return (
                session.query(HabitLog)
                .filter_by(habit_id=habit_id)
                .order_by(HabitLog.streak_duration.desc(), HabitLog.id.asc())
                .first()
            )

    def get_longest_streak_achieved(self):
        """Longest streak across all habits in days (0 when nothing is logged)."""
        with self.store.session() as session:
            return session.query(func.coalesce(func.max(HabitLog.streak_duration), 0)).scalar()

    def get_all(self):
        with self.store.session() as session:
            return (
                session.query(HabitLog)
                .order_by(HabitLog.streak_duration.desc(), HabitLog.id.asc())
                .all()
            )
