"""Repository for habit database operations."""

import logging

from trackhabit.errors import ValidationError
from trackhabit.models.base_repository import BaseRepository
from trackhabit.models.habit import Habit

log = logging.getLogger("habit_repository")

SORT_COLUMNS = {
    'created': Habit.created_at,
    'name': Habit.name,
}

class SqlAlchemyHabitRepository(BaseRepository):
    """SQL Alchemy implementation of habit repository."""

    model_class = Habit

    def insert(self, name):
        """Create a habit and return it with its generated ID."""
        def operation(session):
            habit = Habit(name=name)
            session.add(habit)
            return habit

        habit = self._write(operation, f"creating habit '{name}'")
        log.info(f"Created habit {habit.id}")
        return habit

    def update(self, habit_id, **changes):
        """Update a habit's name and/or active flag.

        Args:
            habit_id: Habit ID
            **changes: ``name`` and/or ``is_active``

        Returns:
            Habit: The updated habit
        """
        unknown = set(changes) - {'name', 'is_active'}
        if unknown:
            raise ValidationError(f"Unknown habit fields: {', '.join(sorted(unknown))}")

        def operation(session):
            habit = self._get_or_raise(session, habit_id)
            for key, value in changes.items():
                setattr(habit, key, value)
            return habit

        return self._write(operation, f"updating habit {habit_id}")

    def deactivate(self, habit_id):
        """Soft-delete a habit, keeping its logs."""
        return self.update(habit_id, is_active=False)

    def delete(self, habit_id):
        """Delete a habit together with all of its logs."""
        def operation(session):
            habit = self._get_or_raise(session, habit_id)
            session.delete(habit)
            return True

        result = self._write(operation, f"deleting habit {habit_id}")
        log.info(f"Deleted habit {habit_id}")
        return result

    def get_by_name(self, name):
        with self.store.session() as session:
            return session.query(Habit).filter_by(name=name).first()

    def get_all(self, sort_by='created', ascending=True, include_inactive=True):
        """Get habits in the requested order.

        Args:
            sort_by: 'created' or 'name'
            ascending: Sort direction
            include_inactive: Whether deactivated habits are returned

        Returns:
            list: Habit instances
        """
        column = SORT_COLUMNS.get(sort_by)
        if column is None:
            raise ValidationError(f"Cannot sort habits by '{sort_by}'")

        with self.store.session() as session:
            query = session.query(Habit)
            if not include_inactive:
                query = query.filter(Habit.is_active.is_(True))
            order = column.asc() if ascending else column.desc()
            return query.order_by(order, Habit.id).all()
