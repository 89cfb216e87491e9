"""Domain models for the application."""

from skill_seekers.models.base import Base
from skill_seekers.models.kv_record import KeyValueRecord

__all__ = ["Base", "KeyValueRecord"]
