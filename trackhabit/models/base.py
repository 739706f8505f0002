"""Declarative base shared by all persisted models."""

from datetime import datetime

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow():
    """Naive UTC timestamp, the convention used for every stored datetime."""
    return datetime.utcnow()
