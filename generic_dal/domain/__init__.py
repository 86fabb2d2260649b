"""
Domain models for the generic data access layer.
"""

from .data_object import DataObject, MIN_TIMESTAMP, current_timestamp

__all__ = [
    "DataObject",
    "MIN_TIMESTAMP",
    "current_timestamp",
]
