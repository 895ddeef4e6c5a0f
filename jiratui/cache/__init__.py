"""
Caching module for jiratui.
Provides the persistent edit-metadata cache.
"""

from .fields_cache import FieldsCache, ProjectIssueTypeKey, make_key

__all__ = [
    'FieldsCache',
    'ProjectIssueTypeKey',
    'make_key',
]
