"""Habit model for the application."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship, validates

from trackhabit.errors import ValidationError
from trackhabit.models.base import Base, utcnow


class Habit(Base):
    """A habit being tracked by the user.

    Attributes:
        id: Primary key
        name: Unique, non-empty display name
        is_active: False once the habit has been soft-deactivated
        created_at: When the habit was created
        updated_at: Refreshed on every mutation
        logs: Streak records belonging to this habit
    """

    __tablename__ = 'habits'

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, unique=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    logs = relationship(
        'HabitLog',
        back_populates='habit',
        cascade='all, delete-orphan',
        passive_deletes=True,
        order_by='HabitLog.created_at.desc()',
    )

    @validates('name')
    def validate_name(self, key, value):
        if value is None or not str(value).strip():
            raise ValidationError("Habit name must not be empty")
        return str(value).strip()

    def __repr__(self):
        """String representation of the habit."""
        return f'<Habit {self.id}: {self.name}>'

    def to_dict(self):
        """Convert habit to dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
