"""
Internal DTOs

Results returned by the lending services. These group the records touched
by one operation so callers do not have to re-query them.
"""

from .lending_results import ReturnResult

__all__ = ["ReturnResult"]
