"""
API module for the REST service layer.
"""

from .rest_api import RecordsRestAPI

__all__ = [
    "RecordsRestAPI",
]
