"""Base repository for database operations."""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from trackhabit.errors import ResourceNotFoundError, ValidationError

logger = logging.getLogger(__name__)

class BaseRepository:
    """Base repository implementing common database operations."""

    model_class = None

    def __init__(self, store):
        """Initialize the repository.

        Args:
            store: HabitStore the repository reads from and writes to
        """
        self.store = store

    def _get_or_raise(self, session, entity_id):
        entity = session.get(self.model_class, entity_id)
        if entity is None:
            raise ResourceNotFoundError(f"{self.model_class.__name__} {entity_id} not found")
        return entity

    def get_by_id(self, entity_id):
        """Get an entity by ID.

        Args:
            entity_id: Entity ID

        Returns:
            Entity instance or None
        """
        if not self.model_class:
            raise NotImplementedError("Model class must be set in derived repository")

        with self.store.session() as session:
            return session.get(self.model_class, entity_id)

    def count(self):
        with self.store.session() as session:
            return session.query(self.model_class).count()

    def _write(self, operation, description):
        """Run ``operation(session)`` in a unit of work, translating database errors.

        Args:
            operation: Callable receiving the session and returning the result
            description: Human readable action for log messages

        Returns:
            Whatever ``operation`` returned
        """
        try:
            with self.store.session() as session:
                result = operation(session)
                session.flush()
                return result
        except IntegrityError as e:
            logger.warning(f"Integrity error while {description}: {e.orig}")
            raise ValidationError(f"Could not complete {description}", details=str(e.orig)) from e
        except SQLAlchemyError as e:
            logger.error(f"Error while {description}: {str(e)}")
            raise
