"""
Domain tests for the generic data access layer.

This package contains tests for the DataObject base model, documenting the
identity, equality and timestamp rules every entity inherits.
"""
