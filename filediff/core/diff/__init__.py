"""
Diff module for text comparison.

Provides:
- The sequence differ producing character-level edit scripts
- The classifier turning edit scripts into line-aligned change blocks
"""

from filediff.core.diff.sequence_diff import (
    SequenceDiffer,
    DiffOptions,
    diff,
)
from filediff.core.diff.classifier import (
    ChangeClassifier,
    classify,
)

__all__ = [
    # Sequence diff
    'SequenceDiffer',
    'DiffOptions',
    'diff',
    # Classification
    'ChangeClassifier',
    'classify',
]
