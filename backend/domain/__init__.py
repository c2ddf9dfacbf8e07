"""
Domain Layer

This package contains lending domain rules that are independent of
persistence concerns.

Structure:
- value_objects/: Immutable status types with their transition rules
"""
