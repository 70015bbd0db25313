"""Persistence for passport records.

The store is the persistence collaborator of the reading pipeline: it receives finished
``PassportRecord`` values and owns their lifetime from then on.
"""

from .database import DatabaseConfig, DatabaseManager
from .models import Base, PassportPhotoRecord, SavedPassportRecord
from .repositories import PassportRepository
from .store import PassportStore, SavedPassport

__all__ = [
    "Base",
    "DatabaseConfig",
    "DatabaseManager",
    "PassportPhotoRecord",
    "PassportRepository",
    "PassportStore",
    "SavedPassport",
    "SavedPassportRecord",
]
