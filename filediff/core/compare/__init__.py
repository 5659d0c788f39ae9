"""
Live comparison of two documents.

Provides the line correspondence, navigation, merging and the session
that ties them to the documents and viewports of a host.
"""

from filediff.core.compare.correspondence import LineCorrespondence
from filediff.core.compare.interfaces import DocumentSource, Viewport
from filediff.core.compare.merge import MergeEngine
from filediff.core.compare.navigator import Navigator
from filediff.core.compare.session import (
    ComparisonSession,
    NO_MORE_DIFFERENCES,
    SEARCH_WRAPPED,
)

__all__ = [
    'LineCorrespondence',
    'DocumentSource',
    'Viewport',
    'MergeEngine',
    'Navigator',
    # Session
    'ComparisonSession',
    'NO_MORE_DIFFERENCES',
    'SEARCH_WRAPPED',
]
