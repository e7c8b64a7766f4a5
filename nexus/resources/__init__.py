"""
Resource loading module.

Exports:
- Database: JSON document loading with schema validation
- DataValidationError: Raised when a document fails to load or validate
"""

from nexus.resources.database import Database, DataValidationError

__all__ = [
    "Database",
    "DataValidationError",
]
