"""Explicit success-or-failure outcome returned by the backup manager."""

from typing import Any, Optional

from trackhabit.errors import BackupError


class Result:
    """Outcome of an operation: either a value or a typed ``BackupError``.

    Use the ``success``/``failure`` constructors rather than ``__init__``.
    """

    __slots__ = ('value', 'error')

    def __init__(self, value: Any = None, error: Optional[BackupError] = None):
        self.value = value
        self.error = error

    @classmethod
    def success(cls, value: Any = None) -> 'Result':
        return cls(value=value)

    @classmethod
    def failure(cls, error: BackupError) -> 'Result':
        if error is None:
            raise ValueError("A failed result needs an error")
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    @property
    def kind(self) -> Optional[str]:
        """Failure kind, or None on success."""
        return self.error.kind if self.error is not None else None

    def unwrap(self):
        """Return the value, raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.value

    def to_dict(self):
        if self.error is not None:
            return {'success': False, 'error': self.error.to_dict()}
        value = self.value
        if hasattr(value, 'to_dict'):
            value = value.to_dict()
        elif isinstance(value, list):
            value = [item.to_dict() if hasattr(item, 'to_dict') else item for item in value]
        return {'success': True, 'data': value}

    def __repr__(self):
        if self.error is not None:
            return f"<Result failure {self.error.kind}: {self.error.message}>"
        return f"<Result success {self.value!r}>"
