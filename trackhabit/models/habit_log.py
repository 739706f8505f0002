"""Habit log model: one recorded streak for a habit."""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship, validates

from trackhabit.errors import ValidationError
from trackhabit.models.base import Base, utcnow


class HabitLog(Base):
    """Streak record created when a habit's progress is reset.

    Attributes:
        id: Primary key
        habit_id: Owning habit (deleted together with it)
        streak_duration: Length of the streak in days, never negative
        created_at: When the streak was recorded
        updated_at: When the log entry was last corrected
        trigger: What caused the reset (optional)
        notes: Free-form notes (optional)
    """

    __tablename__ = 'habit_logs'
    __table_args__ = (
        CheckConstraint('streak_duration >= 0', name='ck_habit_logs_streak_non_negative'),
    )

    id = Column(Integer, primary_key=True)
    habit_id = Column(
        Integer,
        ForeignKey('habits.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    streak_duration = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    trigger = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    habit = relationship('Habit', back_populates='logs')

    @validates('streak_duration')
    def validate_streak_duration(self, key, value):
        try:
            days = int(value)
        except (TypeError, ValueError):
            raise ValidationError("Streak duration must be a whole number of days")
        if days < 0:
            raise ValidationError("Streak duration must not be negative")
        return days

    def __repr__(self):
        return f"<HabitLog {self.id} habit={self.habit_id} days={self.streak_duration}>"

    def to_dict(self):
        return {
            'id': self.id,
            'habit_id': self.habit_id,
            'streak_duration': self.streak_duration,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            'trigger': self.trigger,
            'notes': self.notes,
        }
